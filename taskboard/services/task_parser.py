from datetime import date, datetime
from dateutil.relativedelta import relativedelta, MO, TU, WE, TH, FR, SA, SU
from typing import Optional, Sequence, Tuple, Union
import re

from taskboard.schemas.enums import Importance
from taskboard.schemas.project import Project
from taskboard.schemas.task import ParsedTaskInput


# marqueurs d'importance / urgence, les combinaisons d'abord
MARKERS = {
    "*!": (Importance.IMPORTANT, True),
    "!*": (Importance.IMPORTANT, True),
    "*": (Importance.IMPORTANT, False),
    "!": (None, True),
}

TAG_RE = re.compile(r"#(\w+)")
PROJECT_RE = re.compile(r"(?:proj?|p):(\S+)", re.IGNORECASE)
DUE_RE = re.compile(r"@due\(([^)]+)\)", re.IGNORECASE)

NEXT_DAY_RE = re.compile(r"^next\s+(monday|tuesday|wednesday|thursday|friday|saturday|sunday)$")
ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
SLASH_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

WEEKDAYS = {
    "monday": MO, "tuesday": TU, "wednesday": WE, "thursday": TH,
    "friday": FR, "saturday": SA, "sunday": SU,
}


def _as_date(today: Optional[Union[date, datetime]]) -> date:
    if today is None:
        return date.today()
    if isinstance(today, datetime):
        return today.date()
    return today


def _strip_first(text: str, match: "re.Match[str]") -> str:
    return (text[:match.start()] + text[match.end():]).strip()


def _leading_marker(text: str) -> Optional[Tuple[str, str]]:
    for marker in MARKERS:
        if text.startswith(marker):
            return marker, text[len(marker):].strip()
    return None


def _trailing_marker(text: str) -> Optional[Tuple[str, str]]:
    # uniquement un jeton isolé en fin de texte, jamais au milieu
    parts = text.rsplit(None, 1)
    if len(parts) == 2 and parts[1] in MARKERS:
        return parts[1], parts[0].strip()
    return None


# Résout une date relative ("tomorrow", "next friday", "2025-03-01"...)
def resolve_relative_date(token: str, today: Optional[Union[date, datetime]] = None) -> Optional[date]:
    normalized = token.lower().strip()
    today = _as_date(today)

    if normalized == "today":
        return today

    if normalized == "tomorrow":
        return today + relativedelta(days=1)

    if normalized == "next week":
        return today + relativedelta(weeks=1)

    # "next monday" un lundi -> lundi suivant, jamais aujourd'hui
    next_day = NEXT_DAY_RE.match(normalized)
    if next_day:
        weekday = WEEKDAYS[next_day.group(1)]
        return today + relativedelta(days=1, weekday=weekday(+1))

    iso = ISO_DATE_RE.match(normalized)
    if iso:
        year, month, day = (int(g) for g in iso.groups())
        return _safe_date(year, month, day)

    # MM/DD/YYYY, le mois d'abord
    slash = SLASH_DATE_RE.match(normalized)
    if slash:
        month, day, year = (int(g) for g in slash.groups())
        return _safe_date(year, month, day)

    return None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_quick_add(raw: str, today: Optional[Union[date, datetime]] = None) -> ParsedTaskInput:
    """Parse une ligne quick-add en brouillon de tâche.

    Syntaxe:
    - préfixe * (important), ! (urgent), *! ou !* (les deux)
    - #tag (plusieurs possibles, en minuscules)
    - proj:Nom, pro:Nom ou p:Nom (seule la première occurrence compte)
    - @due(date) (seule la première occurrence compte)
    - sans préfixe, un marqueur isolé en fin de texte compte aussi, à
      condition qu'un #tag, p:Nom ou @due() soit présent
    - le reste devient le nom

    Ne lève jamais d'exception: au pire le nom est le texte brut nettoyé.
    """
    text = (raw or "").strip()
    importance = Importance.NORMAL
    urgent = False

    leading = _leading_marker(text)
    if leading:
        marker, text = leading
        marker_importance, urgent = MARKERS[marker]
        importance = marker_importance or importance

    tags = [tag.lower() for tag in TAG_RE.findall(text)]
    text = TAG_RE.sub("", text).strip()

    project = None
    project_match = PROJECT_RE.search(text)
    if project_match:
        project = project_match.group(1)
        text = _strip_first(text, project_match)

    due_date = None
    due_match = DUE_RE.search(text)
    if due_match:
        due_date = resolve_relative_date(due_match.group(1), today)
        text = _strip_first(text, due_match)

    # marqueur final seulement si la ligne contenait aussi de la syntaxe quick-add
    tokens_found = bool(tags or project_match or due_match)
    if not leading and tokens_found:
        trailing = _trailing_marker(text)
        if trailing:
            marker, text = trailing
            marker_importance, urgent = MARKERS[marker]
            importance = marker_importance or importance

    name = re.sub(r"\s+", " ", text).strip()

    return ParsedTaskInput(
        name=name,
        importance=importance,
        urgent=urgent,
        project=project,
        tags=tags,
        due_date=due_date,
    )


def match_project(projects: Sequence[Project], query: str) -> Optional[Project]:
    """Retrouve un projet par nom: exact, puis contenu, puis préfixe (insensible à la casse)."""
    if not query or not query.strip():
        return None

    normalized = query.lower().strip()

    for project in projects:
        if project.name.lower() == normalized:
            return project

    for project in projects:
        if normalized in project.name.lower():
            return project

    for project in projects:
        if project.name.lower().startswith(normalized):
            return project

    return None
