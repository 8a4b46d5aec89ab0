"""Tests for locating the directory that holds .env and bin/ndf-parser."""

from warno_companion.paths import get_repo_root


def test_checkout_root(tmp_path):
    (tmp_path / "pyproject.toml").write_text("", encoding="utf-8")
    for package in ("warno_companion", "warno_descriptor_extractor"):
        (tmp_path / package).mkdir()
    module = tmp_path / "warno_companion" / "config.py"
    module.write_text("", encoding="utf-8")

    assert get_repo_root(module) == tmp_path.resolve()


def test_installed_falls_back_to_working_directory(tmp_path, monkeypatch):
    site_packages = tmp_path / "site-packages" / "warno_companion"
    site_packages.mkdir(parents=True)
    workspace = tmp_path / "exports"
    workspace.mkdir()
    monkeypatch.chdir(workspace)

    assert get_repo_root(site_packages / "config.py") == workspace.resolve()
