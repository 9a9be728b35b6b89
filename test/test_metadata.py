"""
Test extraction of title, group and labels from documents.
"""

from pytest import fixture, mark

from evermark import *


@fixture
def renderer() -> MarkupRenderer:
    return MarkupRenderer()


def parse(renderer: MarkupRenderer, text: str) -> NoteInfo:
    return parse_note_info(renderer.parse(text))


def test_title(renderer: MarkupRenderer):
    info = parse(renderer, "Intro text\n\n# Sprint Plan\n\n## Goals\n")
    assert info.title == "Sprint Plan"


def test_title_setext(renderer: MarkupRenderer):
    info = parse(renderer, "Sprint Plan\n===========\n\nBody\n")
    assert info.title == "Sprint Plan"


@mark.parametrize("text", ["", "Just text\n", "- a list\n", "#\n"])
def test_title_default(renderer: MarkupRenderer, text: str):
    assert parse(renderer, text).title == DEFAULT_TITLE


def test_no_tokens():
    info = parse_note_info()

    assert info == NoteInfo(title=DEFAULT_TITLE)
    assert info.group_name is None
    assert info.label_names is None


def test_directive(renderer: MarkupRenderer):
    info = parse(renderer, "# Plan\n\n@(Work)[urgent|review]\n")

    assert info.group_name == "Work"
    assert info.label_names == ["urgent", "review"]


def test_directive_no_labels(renderer: MarkupRenderer):
    info = parse(renderer, "# Plan\n\n@(Work)\n")

    assert info.group_name == "Work"
    assert info.label_names is None


def test_no_directive(renderer: MarkupRenderer):
    info = parse(renderer, "# Plan\n\nNothing to see here.\n")

    assert info.group_name is None
    assert info.label_names is None


@mark.parametrize(
    "labels,expected",
    [
        ("[ urgent | review ]", ["urgent", "review"]),
        ("[urgent||review|]", ["urgent", "review"]),
        ("[Needs Review]", ["Needs Review"]),
        ("[]", None),
        ("[ | ]", None),
    ],
)
def test_directive_labels(
    renderer: MarkupRenderer, labels: str, expected: list[str] | None
):
    info = parse(renderer, f"@(Work){labels}\n")

    assert info.group_name == "Work"
    assert info.label_names == expected


@mark.parametrize(
    "text",
    [
        "@(Work\n",
        "@Work)[urgent]\n",
        "@()\n",
        "@(Work)[urgent\n",
        "Filed under @(Work)\n",
        "@(Work) and more\n",
    ],
)
def test_directive_malformed(renderer: MarkupRenderer, text: str):
    """
    Malformed or embedded directives are treated as absent.
    """
    info = parse(renderer, f"# Plan\n\n{text}")

    assert info.title == "Plan"
    assert info.group_name is None
    assert info.label_names is None


def test_directive_first_wins(renderer: MarkupRenderer):
    info = parse(renderer, "@(Work)[a]\n\n@(Home)[b]\n")

    assert info.group_name == "Work"
    assert info.label_names == ["a"]


def test_directive_group_with_spaces(renderer: MarkupRenderer):
    info = parse(renderer, "@(Team Notes 2024)[q1]\n")

    assert info.group_name == "Team Notes 2024"
    assert info.label_names == ["q1"]


def test_directive_in_paragraph(renderer: MarkupRenderer):
    """
    The directive must be on a line by itself, separate from other text.
    """
    info = parse(renderer, "Some text\n@(Work)\n")

    assert info.group_name is None


@mark.parametrize(
    "text",
    [
        "```\n@(Work)[secret]",
        "```\n@(Work)[secret]\n```\n",
        "    @(Work)[secret]\n",
    ],
)
def test_directive_in_code(renderer: MarkupRenderer, text: str):
    """
    Directives within code blocks, even unterminated ones, are ignored.
    """
    info = parse(renderer, f"# Plan\n\n{text}")

    assert info.title == "Plan"
    assert info.group_name is None
    assert info.label_names is None
