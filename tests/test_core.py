import pytest

from aitrans import cli, core
from aitrans.history import HistoryEntry, TranslationHistory
from tests.conftest import FakeTranslationService


@pytest.fixture
def created_services(monkeypatch):
    services = []

    def fake_factory(service_name="gemini", **kwargs):
        kwargs.pop("timeout", None)
        kwargs["api_key"] = kwargs.get("api_key") or "test-key"
        service = FakeTranslationService(**kwargs)
        services.append(service)
        return service

    monkeypatch.setattr(core, "get_translation_service", fake_factory)
    return services


def test_run_translation_writes_output_and_history(tmp_path, created_services):
    source = tmp_path / "page.html"
    source.write_text("<p>Hello <b>world</b></p>", encoding="utf-8")
    history_file = tmp_path / "history.json"

    output = core.run_translation(str(source), target_language="fr", history_file=str(history_file))

    assert output == str(tmp_path / "page_translated.html")
    assert (tmp_path / "page_translated.html").read_text(encoding="utf-8") == "<p>HELLO <b>WORLD</b></p>"
    assert created_services[0].target_language == "fr"

    entries = TranslationHistory(str(history_file)).load()
    assert len(entries) == 1
    assert entries[0].target_language == "fr"
    assert entries[0].input_html == "<p>Hello <b>world</b></p>"
    assert entries[0].output_html == "<p>HELLO <b>WORLD</b></p>"


def test_run_translation_without_history_file(tmp_path, created_services):
    source = tmp_path / "page.html"
    source.write_text("<p>Hi</p>", encoding="utf-8")
    output_file = tmp_path / "out.html"

    assert core.run_translation(str(source), str(output_file)) == str(output_file)
    assert not (tmp_path / "history.json").exists()


def test_run_translation_propagates_errors(tmp_path, created_services):
    with pytest.raises(FileNotFoundError):
        core.run_translation(str(tmp_path / "missing.html"))


def test_cli_translates_with_swapped_languages(tmp_path, created_services):
    source = tmp_path / "page.html"
    source.write_text("<p>Hi</p>", encoding="utf-8")

    code = cli.main(["-i", str(source), "--from", "en", "--to", "ja", "--swap", "--api-key", "k"])

    assert code == 0
    assert (created_services[0].source_language, created_services[0].target_language) == ("ja", "en")


def test_cli_requires_input_file(capsys):
    assert cli.main([]) == 1
    assert "-i" in capsys.readouterr().out


def test_cli_reports_failure(tmp_path, created_services):
    assert cli.main(["-i", str(tmp_path / "missing.html")]) == 1


def test_cli_history_actions_require_history_file():
    assert cli.main(["--show-history"]) == 1


def test_cli_show_and_clear_history(tmp_path, capsys):
    history_file = str(tmp_path / "history.json")
    TranslationHistory(history_file).add(HistoryEntry(target_language="vi", model="gemini-2.5-flash"))

    assert cli.main(["--history", history_file, "--show-history"]) == 0
    assert "Vietnamese · gemini-2.5-flash" in capsys.readouterr().out

    assert cli.main(["--history", history_file, "--clear-history"]) == 0
    assert TranslationHistory(history_file).load() == []

    assert cli.main(["--history", history_file, "--show-history"]) == 0
    assert "暂无翻译历史" in capsys.readouterr().out
