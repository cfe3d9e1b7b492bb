from datetime import timedelta

import pytest

from launchdarkly_reports import (
    StaleFlagReport,
    build_report,
    filter_flags,
    flag_link,
    sort_flags,
)

from conftest import NOW

THRESHOLD = timedelta(days=180)
HOST = "https://app.launchdarkly.com"


def report_for(flags, **kwargs):
    return StaleFlagReport(flags, "default", "production", THRESHOLD, HOST, now=NOW, **kwargs)


class TestFilterFlags:

    def test_keeps_old_temporary_flags(self, make_flag):
        flags = [
            make_flag("old"),
            make_flag("recently-created", created=10, modified=10),
            make_flag("recently-modified", created=400, modified=10),
            make_flag("permanent", temporary=False),
        ]

        assert [f.key for f in filter_flags(flags, THRESHOLD, now=NOW)] == ["old"]

    def test_with_permanent(self, make_flag):
        flags = [make_flag("temporary"), make_flag("permanent", temporary=False)]

        assert [f.key for f in filter_flags(flags, THRESHOLD, with_permanent=True, now=NOW)] == [
            "temporary", "permanent",
        ]

    def test_unset_timestamps_count_as_old(self, make_flag):
        flags = [make_flag("no-dates", created=None, modified=None)]

        assert filter_flags(flags, THRESHOLD, now=NOW) == flags

    def test_threshold_boundary_is_excluded(self, make_flag):
        flags = [make_flag("exactly", created=180, modified=180)]

        assert filter_flags(flags, THRESHOLD, now=NOW) == []

    def test_idempotent(self, make_flag):
        flags = [
            make_flag("a"),
            make_flag("b", created=10),
            make_flag("c", temporary=False),
            make_flag("d", modified=None),
        ]
        once = filter_flags(flags, THRESHOLD, now=NOW)

        assert filter_flags(once, THRESHOLD, now=NOW) == once


class TestSortFlags:

    def test_maintainer_first(self, make_flag):
        flags = [
            make_flag("z-owned", maintainer="zed@example.com", created=1000, requested=None),
            make_flag("a-owned", maintainer="amy@example.com", created=200, requested=1),
        ]

        assert [f.key for f in sort_flags(flags, THRESHOLD, NOW)] == ["a-owned", "z-owned"]

    def test_inactive_before_inuse_then_oldest(self, make_flag):
        flags = [
            make_flag("inuse-old", created=900, requested=1),
            make_flag("inactive-new", created=200, requested=300),
            make_flag("never-requested", created=300, requested=None),
            make_flag("inuse-new", created=250, requested=2),
            make_flag("no-creation", created=None, requested=None),
        ]

        assert [f.key for f in sort_flags(flags, THRESHOLD, NOW)] == [
            "no-creation", "never-requested", "inactive-new", "inuse-old", "inuse-new",
        ]

    def test_stable_for_equal_keys(self, make_flag):
        flags = [make_flag("first"), make_flag("second"), make_flag("third")]

        assert sort_flags(flags, THRESHOLD, NOW) == flags


def test_flag_link():
    assert flag_link(HOST + "/", "default", "production", "new-checkout") == (
        "https://app.launchdarkly.com/default/production/features/new-checkout"
    )


def test_row(make_flag):
    flag = make_flag("new-checkout", created=400, modified=200, requested=2)

    assert report_for([flag]).row(flag) == [
        "new-checkout",
        "dev@example.com",
        "1.1 years ago",
        "6.7 months ago",
        "2.0 days ago",
        "inuse",
        "temporary",
        "https://app.launchdarkly.com/default/production/features/new-checkout",
    ]


def test_render_text_aligns_columns(make_flag):
    flags = [
        make_flag("a-much-longer-flag-key", maintainer="someone@example.com"),
        make_flag("short", maintainer="x@y.z", requested=1, temporary=False),
    ]
    lines = report_for(flags).render("text").splitlines()

    assert len(lines) == 3
    assert lines[0].startswith("KEY ")
    link_column = lines[0].index("LINK")
    status_column = lines[0].index("STATUS")
    for line in lines[1:]:
        assert line.index("https://") == link_column
        assert line[status_column:].split()[0] in ("inactive", "inuse")
    assert lines[1].startswith("a-much-longer-flag-key ")
    assert lines[0].index("MAINTAINER") == len("a-much-longer-flag-key") + 1


def test_render_markdown(make_flag):
    output = report_for([make_flag("old")]).render("markdown")
    lines = output.splitlines()

    assert lines[0] == (
        "KEY | MAINTAINER | CREATION DATE | LAST MODIFIED | LAST REQUESTED | STATUS | TEMPORARY | LINK"
    )
    assert lines[1] == " | ".join(["---"] * 8)
    assert lines[2] == (
        "old | dev@example.com | 1.1 years ago | 1.1 years ago | never | inactive | temporary | "
        "https://app.launchdarkly.com/default/production/features/old"
    )


def test_render_csv(make_flag):
    output = report_for([make_flag("old")]).render("csv")

    assert output == (
        "KEY,MAINTAINER,CREATION DATE,LAST MODIFIED,LAST REQUESTED,STATUS,TEMPORARY,LINK\n"
        "old,dev@example.com,1.1 years ago,1.1 years ago,never,inactive,temporary,"
        "https://app.launchdarkly.com/default/production/features/old\n"
    )


def test_render_empty_report():
    assert report_for([]).render("csv") == (
        "KEY,MAINTAINER,CREATION DATE,LAST MODIFIED,LAST REQUESTED,STATUS,TEMPORARY,LINK\n"
    )
    assert report_for([]).render("text").startswith("KEY ")


def test_render_summary_groups_by_maintainer(make_flag):
    flags = [
        make_flag("amy-stale", maintainer="amy@example.com"),
        make_flag("amy-used", maintainer="amy@example.com", requested=1),
        make_flag("bob-stale", maintainer="bob@example.com", temporary=False),
    ]
    output = report_for(flags).render("summary")
    table, inactive_section = output.split("INACTIVE FLAGS")
    inactive, inuse = inactive_section.split("INUSE FLAGS")

    assert "TEMPORARY" not in table
    assert "https://" not in table
    assert table.splitlines()[0].split() == [
        "KEY", "MAINTAINER", "CREATION", "DATE", "LAST", "MODIFIED", "LAST", "REQUESTED", "STATUS",
    ]

    assert inactive.index("amy@example.com:") < inactive.index("bob@example.com:")
    assert "  - amy-stale (created 1.1 years ago, modified 1.1 years ago, requested never) " \
           "https://app.launchdarkly.com/default/production/features/amy-stale" in inactive
    assert "bob-stale" in inactive
    assert "amy-used" not in inactive

    assert "amy@example.com:" in inuse
    assert "amy-used" in inuse
    assert "bob@example.com" not in inuse


def test_render_unknown_format(make_flag):
    with pytest.raises(ValueError):
        report_for([make_flag("old")]).render("html")


def test_build_report_filters_and_sorts(make_flag):
    flags = [
        make_flag("zed-flag", maintainer="zed@example.com"),
        make_flag("fresh", created=5, modified=5),
        make_flag("amy-flag", maintainer="amy@example.com"),
        make_flag("permanent", temporary=False),
    ]
    report = build_report(flags, "default", "production", THRESHOLD, HOST, now=NOW)

    assert [f.key for f in report.flags] == ["amy-flag", "zed-flag"]
    assert report.now == NOW


def test_build_report_summary_keeps_permanent(make_flag):
    flags = [make_flag("permanent", temporary=False), make_flag("temporary")]
    report = build_report(flags, "default", "production", THRESHOLD, HOST, fmt="summary", now=NOW)

    assert {f.key for f in report.flags} == {"permanent", "temporary"}
