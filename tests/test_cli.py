import pytest

import ubcscraper.main as cli
from ubcscraper.core.exceptions import NavigationFailure, SubjectIndexError
from ubcscraper.main import build_parser, main
from ubcscraper.models.schema import Course, CrawlFailure, CrawlResult


def test_command_is_required():
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args([])
    assert exc_info.value.code == 2


def test_crawl_arguments():
    args = build_parser().parse_args(
        ["crawl", "--subject", "145", "--concurrency", "1", "--fail-fast", "--load"]
    )
    assert args.command == "crawl"
    assert args.subject == 145
    assert args.concurrency == 1
    assert args.fail_fast
    assert args.load
    assert not args.headful


def test_load_missing_snapshot_exits_non_zero(tmp_path):
    with pytest.raises(SystemExit) as exc_info:
        main(
            [
                "load",
                "--snapshot", str(tmp_path / "missing.json"),
                "--database-url", f"sqlite:///{tmp_path / 'catalog.db'}",
            ]
        )
    assert exc_info.value.code == 1


def test_load_snapshot(tmp_path, capsys):
    snapshot = tmp_path / "output.json"
    snapshot.write_text(
        '[{"courseTitle": "Calculus I", "courseCode": "MATH 100", '
        '"preReqs": [], "coReqs": ["MATH 101"], "sections": []}]'
    )
    with pytest.raises(SystemExit) as exc_info:
        main(
            [
                "load",
                "--snapshot", str(snapshot),
                "--database-url", f"sqlite:///{tmp_path / 'catalog.db'}",
            ]
        )
    assert exc_info.value.code == 0
    out = capsys.readouterr().out
    assert "Load Complete!" in out
    assert "Co-requisites: 1" in out


def crawl_args(*extra):
    return build_parser().parse_args(["crawl", *extra])


def test_bad_subject_index_exits_2(monkeypatch, settings):
    async def fake_run_crawl(*args, **kwargs):
        raise SubjectIndexError(99, 3)

    monkeypatch.setattr(cli, "run_crawl", fake_run_crawl)
    assert cli.cmd_crawl(crawl_args("--subject", "99"), settings) == 2


def test_aborted_crawl_exits_1(monkeypatch, settings):
    async def fake_run_crawl(*args, **kwargs):
        raise NavigationFailure(settings.catalog_url, "HTTP 503")

    monkeypatch.setattr(cli, "run_crawl", fake_run_crawl)
    assert cli.cmd_crawl(crawl_args(), settings) == 1


def test_other_value_errors_are_not_reported_as_bad_index(monkeypatch, settings):
    async def fake_run_crawl(*args, **kwargs):
        raise ValueError("unexpected")

    monkeypatch.setattr(cli, "run_crawl", fake_run_crawl)
    with pytest.raises(ValueError, match="unexpected"):
        cli.cmd_crawl(crawl_args(), settings)


def test_summary_reports_skipped_pages(monkeypatch, settings, capsys):
    result = CrawlResult(
        courses=[Course(title="Calculus I", code="MATH 100")],
        failures=[
            CrawlFailure(
                url="https://courses.test/c/CPSC121",
                stage="course",
                error_type="NavigationFailure",
                message="Failed to load",
            )
        ],
        subject_count=1,
    )

    async def fake_run_crawl(*args, **kwargs):
        return result

    monkeypatch.setattr(cli, "run_crawl", fake_run_crawl)
    assert cli.cmd_crawl(crawl_args(), settings) == 0

    out = capsys.readouterr().out
    assert "Failures: 1 pages skipped, snapshot is partial" in out
    assert "https://courses.test/c/CPSC121: NavigationFailure" in out
    assert f"Report: {settings.snapshot_path.with_name('output.failures.json')}" in out
