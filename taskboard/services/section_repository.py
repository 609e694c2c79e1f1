"""Section repository"""

from typing import Any, Dict, List, Optional

from taskboard.core.exceptions import InvalidEntityError
from taskboard.schemas.enums import EntityKind, MAIN_CONTEXT
from taskboard.schemas.section import Section
from taskboard.services.repository import EntityRepository, locked, new_id


class SectionRepository(EntityRepository):
    entity = EntityKind.SECTION
    model = Section
    order_by = "position"

    def get_sections_by_context(self, context: str) -> List[Section]:
        return [s for s in self.items if s.context == context]

    @locked
    def create_section(self, name: str, context: str = MAIN_CONTEXT) -> Optional[Section]:
        if not name or not name.strip():
            raise InvalidEntityError("Section name cannot be empty")

        # position: à la fin de son contexte
        positions = [s.position for s in self.get_sections_by_context(context)]
        section = Section(
            id=new_id(),
            name=name.strip(),
            position=max(positions, default=-1) + 1,
            context=context,
            user_id=self.owner_id,
        )
        return self._insert(section)

    def update_section(self, section_id: str, updates: Dict[str, Any]) -> Optional[Section]:
        if "name" in updates and not (updates["name"] or "").strip():
            raise InvalidEntityError("Section name cannot be empty")
        return self._update(section_id, updates)

    def delete_section(self, section_id: str) -> Optional[Section]:
        return self._delete(section_id)

    @locked
    def reorder_sections(self, ordered_ids: List[str]) -> bool:
        known = {s.id for s in self.items}
        return self._reorder(ordered_ids, scope_id="sections", known=known)
