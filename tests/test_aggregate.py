import logging

from branchowners.aggregate import aggregate_ownership
from branchowners.codeowners_file import parse_codeowners_text
from branchowners.errors import MatchError
from branchowners.ownership import Ruleset


def _ruleset(text):
    return Ruleset(parse_codeowners_text(text))


def test_end_to_end_scenario():
    ruleset = _ruleset("*.md @docs-team\n/src/ @core-team\n/src/legacy/ @legacy-team\n")
    report = aggregate_ownership(ruleset, {"README.md", "src/app.go", "src/legacy/old.go"})
    assert report.owners_to_files == {
        "@core-team": ["src/app.go"],
        "@docs-team": ["README.md"],
        "@legacy-team": ["src/legacy/old.go"],
    }


def test_rename_endpoints_go_to_their_own_owners():
    ruleset = _ruleset("/old/ @old-team\n/new/ @new-team\n")
    report = aggregate_ownership(ruleset, ["old/x.go", "new/x.go"])
    assert report.owners_to_files == {"@new-team": ["new/x.go"], "@old-team": ["old/x.go"]}


def test_owner_listed_once_with_deduplicated_paths():
    ruleset = _ruleset("*.go @gophers @reviewers\n")
    report = aggregate_ownership(ruleset, ["b.go", "a.go", "b.go"])
    assert report.owners() == ["@gophers", "@reviewers"]
    assert report.owners_to_files["@gophers"] == ["a.go", "b.go"]
    assert report.file_count_for("@reviewers") == 2


def test_unowned_paths_stay_out_of_owner_buckets():
    ruleset = _ruleset("*.go @gophers\nvendor/ \n")
    report = aggregate_ownership(ruleset, ["main.go", "README.md", "vendor/lib.go"])
    assert report.owners_to_files == {"@gophers": ["main.go"]}
    assert report.unowned_files == ["README.md", "vendor/lib.go"]
    assert report.total_files() == 3


def test_match_failure_skips_only_that_path():
    class FlakyRuleset:
        def owners_for(self, path):
            if path == "bad":
                raise MatchError("boom")
            return ruleset.owners_for(path)

    ruleset = _ruleset("* @all\n")
    report = aggregate_ownership(FlakyRuleset(), ["bad", "good.txt"])
    assert report.owners_to_files == {"@all": ["good.txt"]}
    assert report.failed_files == {"bad": "boom"}


def test_empty_changeset():
    report = aggregate_ownership(_ruleset("* @all\n"), [])
    assert report.owners() == []
    assert report.total_files() == 0


def test_unowned_paths_are_logged_one_by_one(caplog):
    log = logging.getLogger("tests.aggregate")
    ruleset = _ruleset("*.go @gophers\n")
    with caplog.at_level(logging.WARNING, logger="tests.aggregate"):
        aggregate_ownership(ruleset, ["main.go", "README.md", "LICENSE"], logger=log)
    unowned = [r.getMessage() for r in caplog.records if "No rule matches" in r.getMessage()]
    assert unowned == ["No rule matches file. file=README.md", "No rule matches file. file=LICENSE"]
