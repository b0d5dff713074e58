import json
import logging

import pytest

import main


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def _site(tmp_path):
    site = tmp_path / "site"
    site.mkdir()
    (site / "index.html").write_text(
        '<html><body>crawler crawler words <a href="a.html">a</a> <a href="b.html">b</a></body></html>'
    )
    (site / "a.html").write_text('<html><body>crawler words <a href="c.html">c</a></body></html>')
    (site / "b.html").write_text('<html><body>words <a href="c.html">c</a></body></html>')
    (site / "c.html").write_text('<html><body>words</body></html>')
    return site


def _config(tmp_path, **crawler):
    options = {
        "start_pages": [(_site(tmp_path) / "index.html").as_uri()],
        "max_depth": 3,
        "timeout_seconds": 30,
        "popular_word_count": 2,
        "parallelism": 2,
        "ignored_words": ["^.$"],
        "result_path": str(tmp_path / "result.json"),
        "profile_output_path": str(tmp_path / "profile.txt"),
    }
    options.update(crawler)
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"crawler": options, "logging": {"level": "WARNING"}}))
    return path


@pytest.mark.parametrize("argv", [[], ["one.yaml", "two.yaml"], ["--foo"], ["config.yaml", "--foo"]])
def test_wrong_argument_count_prints_usage(argv, capsys):
    assert main.main(argv) == 0
    assert "usage:" in capsys.readouterr().out


def test_configuration_error_exits_with_failure(tmp_path, capsys):
    assert main.main([str(tmp_path / "absent.yaml")]) == 1
    assert "Configuration error" in capsys.readouterr().err


def test_full_run_writes_result_and_profile(tmp_path):
    config_path = _config(tmp_path)

    assert main.main([str(config_path)]) == 0

    result = json.loads((tmp_path / "result.json").read_text())
    assert result == {"word_counts": {"words": 4, "crawler": 3}, "urls_visited": 4}

    profile = (tmp_path / "profile.txt").read_text()
    assert profile.startswith("Run at ")
    assert "CrawlerScheduler#crawl_async took" in profile
    assert "PageFetcher#fetch took" in profile


def test_outputs_default_to_stdout(tmp_path, capsys):
    config_path = _config(tmp_path, result_path="", profile_output_path="")

    assert main.main([str(config_path)]) == 0

    out = capsys.readouterr().out
    assert '"urls_visited": 4' in out
    assert "Run at " in out


def test_unwritable_profile_is_fatal(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    config_path = _config(tmp_path, profile_output_path=str(blocker / "profile.txt"))

    assert main.main([str(config_path)]) == 1
    assert (tmp_path / "result.json").exists()
