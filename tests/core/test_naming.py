"""
Tests for the name sanitization pass.

Tests cover:
- sanitize_name: reserved characters replaced one for one, everything else kept
- sanitize_names: renames on disk, bottom-up order, collisions, failures
"""

import pytest

from constants import RESERVED_CHARACTERS
from core.exceptions import RenameFailedError
from core.models import Outcome
from core.naming import sanitize_name, sanitize_names


@pytest.mark.unit
def test_sanitize_name_example():
    assert sanitize_name("my:file?.docx") == "my_file_.docx"


@pytest.mark.unit
@pytest.mark.parametrize("char", sorted(RESERVED_CHARACTERS))
def test_each_reserved_character_is_replaced(char):
    assert sanitize_name(f"a{char}b.txt") == "a_b.txt"


@pytest.mark.unit
def test_non_reserved_characters_are_preserved():
    name = "Résumé (final) – v2 [draft] #1 & co.pdf"
    assert sanitize_name(name) == name


@pytest.mark.unit
def test_name_of_only_reserved_characters_is_not_empty():
    assert sanitize_name('***') == "___"


@pytest.mark.unit
def test_custom_reserved_set_and_placeholder():
    assert sanitize_name("a#b%c", reserved="#%", placeholder="-") == "a-b-c"


@pytest.mark.unit
def test_renames_files_and_folders(
    source_root, make_tree, audit_log, read_records, progress_display, tree_listing
):
    make_tree(
        source_root,
        {
            "Q1|Q2": {"report<final>.docx": "r", "ok.txt": "o"},
            "plain.txt": "p",
        },
    )

    result = sanitize_names(source_root, audit_log, progress_display=progress_display)

    assert tree_listing(source_root) == [
        "Q1_Q2",
        "Q1_Q2/ok.txt",
        "Q1_Q2/report_final_.docx",
        "plain.txt",
    ]
    assert (result.visited, result.changed, result.failed) == (4, 2, 0)

    records = read_records()
    # Contents are renamed before their folder
    assert [(r.outcome, r.event, r.path, r.detail) for r in records] == [
        (
            Outcome.RENAMED,
            "NameSanitized",
            str(source_root / "Q1|Q2" / "report<final>.docx"),
            str(source_root / "Q1|Q2" / "report_final_.docx"),
        ),
        (
            Outcome.RENAMED,
            "NameSanitized",
            str(source_root / "Q1|Q2"),
            str(source_root / "Q1_Q2"),
        ),
    ]


@pytest.mark.unit
def test_collision_is_logged_and_nothing_is_overwritten(
    source_root, make_tree, audit_log, read_records, progress_display
):
    make_tree(source_root, {"a?b.txt": "question", "a_b.txt": "underscore"})

    result = sanitize_names(source_root, audit_log, progress_display=progress_display)

    assert (source_root / "a?b.txt").read_text() == "question"
    assert (source_root / "a_b.txt").read_text() == "underscore"
    assert result.failed == 1
    (record,) = read_records()
    assert record.outcome is Outcome.FAILED
    assert record.event == "NameCollision"
    assert record.path == str(source_root / "a?b.txt")


@pytest.mark.unit
@pytest.mark.mock
def test_rename_failure_is_logged_and_pass_continues(
    source_root, make_tree, audit_log, read_records, progress_display, mocker
):
    make_tree(source_root, {"a:1.txt": "1", "b:2.txt": "2"})
    fs = mocker.MagicMock()
    fs.rename.side_effect = [
        RenameFailedError(
            message="Failed to rename",
            path=str(source_root / "a:1.txt"),
            original_exception=PermissionError("file is open in another program"),
        ),
        source_root / "b_2.txt",
    ]

    result = sanitize_names(
        source_root, audit_log, fs=fs, progress_display=progress_display
    )

    assert (result.changed, result.failed) == (1, 1)
    assert [(r.outcome, r.event) for r in read_records()] == [
        (Outcome.FAILED, "RenameFailed"),
        (Outcome.RENAMED, "NameSanitized"),
    ]


@pytest.mark.unit
def test_second_run_changes_nothing(
    source_root, make_tree, audit_log, read_records, progress_display
):
    make_tree(source_root, {"x*y": {"p:q.txt": "z"}})
    sanitize_names(source_root, audit_log, progress_display=progress_display)
    first_run_records = len(read_records())

    result = sanitize_names(source_root, audit_log, progress_display=progress_display)

    assert result.changed == 0
    assert len(read_records()) == first_run_records
