import pytest
from datetime import date

from taskboard.schemas.enums import Importance
from taskboard.schemas.project import Project
from taskboard.services.task_parser import parse_quick_add, resolve_relative_date, match_project

MONDAY = date(2025, 3, 3)


class TestParseQuickAdd:
    def test_plain_text(self):
        """Texte sans syntaxe spéciale: nom nettoyé, reste par défaut"""
        parsed = parse_quick_add("  buy   some milk  ")
        assert parsed.name == "buy some milk"
        assert parsed.importance == Importance.NORMAL
        assert parsed.urgent is False
        assert parsed.tags == []
        assert parsed.project is None
        assert parsed.due_date is None

    def test_tags_in_order(self):
        parsed = parse_quick_add("buy milk #grocery #urgent")
        assert parsed.tags == ["grocery", "urgent"]
        assert parsed.name == "buy milk"

    def test_tags_lowercased(self):
        assert parse_quick_add("call #Work").tags == ["work"]

    @pytest.mark.parametrize("raw", ["*!Fix bug", "!*Fix bug", "*! Fix bug"])
    def test_combined_prefix(self, raw):
        parsed = parse_quick_add(raw)
        assert parsed.importance == Importance.IMPORTANT
        assert parsed.urgent is True
        assert parsed.name == "Fix bug"

    def test_star_prefix(self):
        parsed = parse_quick_add("*Write report")
        assert parsed.importance == Importance.IMPORTANT
        assert parsed.urgent is False

    def test_bang_prefix(self):
        parsed = parse_quick_add("!Pay rent")
        assert parsed.importance == Importance.NORMAL
        assert parsed.urgent is True
        assert parsed.name == "Pay rent"

    def test_marker_mid_string_ignored(self):
        parsed = parse_quick_add("Fix * the bug")
        assert parsed.importance == Importance.NORMAL
        assert parsed.name == "Fix * the bug"

    def test_project_and_date(self):
        parsed = parse_quick_add("Call client p:Acme @due(tomorrow)", today=MONDAY)
        assert parsed.project == "Acme"
        assert parsed.due_date == date(2025, 3, 4)
        assert parsed.name == "Call client"

    @pytest.mark.parametrize("prefix", ["proj:", "pro:", "p:", "PROJ:"])
    def test_project_prefixes(self, prefix):
        assert parse_quick_add(f"Draft {prefix}Growth").project == "Growth"

    def test_only_first_project_and_due(self):
        parsed = parse_quick_add("Sync p:One p:Two @due(today) @due(tomorrow)", today=MONDAY)
        assert parsed.project == "One"
        assert parsed.due_date == MONDAY
        assert "p:Two" in parsed.name

    def test_bad_due_date_is_dropped(self):
        parsed = parse_quick_add("Ship it @due(someday)")
        assert parsed.due_date is None
        assert parsed.name == "Ship it"

    def test_full_line_with_trailing_marker(self):
        parsed = parse_quick_add("Plan launch *! #work p:Growth @due(2025-03-01)")
        assert parsed.name == "Plan launch"
        assert parsed.importance == Importance.IMPORTANT
        assert parsed.urgent is True
        assert parsed.tags == ["work"]
        assert parsed.project == "Growth"
        assert parsed.due_date == date(2025, 3, 1)

    def test_trailing_marker_ignored_in_plain_prose(self):
        """Sans #tag, p: ni @due, un ! final reste dans le nom"""
        parsed = parse_quick_add("Hurry up !")
        assert parsed.name == "Hurry up !"
        assert parsed.urgent is False
        assert parsed.importance == Importance.NORMAL

    def test_empty_input(self):
        """Jamais d'exception, même vide"""
        assert parse_quick_add("").name == ""
        assert parse_quick_add(None).name == ""


class TestResolveRelativeDate:
    def test_keywords(self):
        assert resolve_relative_date("today", MONDAY) == MONDAY
        assert resolve_relative_date("Tomorrow", MONDAY) == date(2025, 3, 4)
        assert resolve_relative_date(" next week ", MONDAY) == date(2025, 3, 10)

    def test_next_weekday_is_strictly_forward(self):
        """Un lundi, "next monday" = lundi suivant"""
        assert resolve_relative_date("next monday", MONDAY) == date(2025, 3, 10)
        assert resolve_relative_date("next friday", MONDAY) == date(2025, 3, 7)
        assert resolve_relative_date("next sunday", MONDAY) == date(2025, 3, 9)

    def test_iso_and_month_first(self):
        assert resolve_relative_date("2025-12-24", MONDAY) == date(2025, 12, 24)
        assert resolve_relative_date("04/05/2025", MONDAY) == date(2025, 4, 5)

    @pytest.mark.parametrize("token", ["someday", "2025-02-30", "13/01/2025", ""])
    def test_unresolvable(self, token):
        assert resolve_relative_date(token, MONDAY) is None


class TestMatchProject:
    projects = [
        Project(id="1", name="Marketing Growth", user_id="u"),
        Project(id="2", name="Growth", user_id="u"),
        Project(id="3", name="Home", user_id="u"),
    ]

    def test_exact_wins_over_substring(self):
        assert match_project(self.projects, "growth").id == "2"

    def test_substring(self):
        assert match_project(self.projects, "market").id == "1"

    def test_first_in_list_wins(self):
        assert match_project(self.projects, "ro").id == "1"

    def test_no_match(self):
        assert match_project(self.projects, "garden") is None
        assert match_project(self.projects, "") is None
