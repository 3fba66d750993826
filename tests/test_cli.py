from __future__ import annotations

import json

import pytest

from attachment_resolver import cli
from attachment_resolver.bootstrap import build_services
from attachment_resolver.data import AssetKind
from attachment_resolver.services import ServiceRegistry


@pytest.fixture
def registry(settings, monkeypatch: pytest.MonkeyPatch) -> ServiceRegistry:
    services = build_services(settings)
    monkeypatch.setattr(cli, "build_services", lambda: services)
    monkeypatch.setattr(cli, "configure_logging", lambda options: None)
    return services


def test_resolve_prints_ids_and_failures(registry: ServiceRegistry, capsys) -> None:
    assert registry.catalog is not None
    asset = registry.catalog.add(canonical_url="https://media.example.test/uploads/a.jpg")
    embed = registry.catalog.add(canonical_url="https://video.test/v", kind=AssetKind.EMBED)

    exit_code = cli.main(["resolve", str(asset.id), str(embed.id)])

    out = capsys.readouterr().out.splitlines()
    assert exit_code == 1
    assert out == [f"{asset.id} -> {asset.id}", f"{embed.id} -> not found"]


def test_resolve_succeeds_for_known_canonical_url(registry: ServiceRegistry, capsys) -> None:
    assert registry.catalog is not None
    asset = registry.catalog.add(canonical_url="https://media.example.test/uploads/a.jpg")

    exit_code = cli.main(["resolve", "https://media.example.test/uploads/a.jpg"])

    assert exit_code == 0
    assert capsys.readouterr().out.strip().endswith(f"-> {asset.id}")


def test_info_prints_report(registry: ServiceRegistry, capsys) -> None:
    assert cli.main(["info"]) == 0

    out = capsys.readouterr().out
    assert "python version:" in out
    assert "attachments: 0" in out


def test_info_exports_json(registry: ServiceRegistry, tmp_path, capsys) -> None:
    target = tmp_path / "report.json"

    assert cli.main(["info", "--json", str(target)]) == 0

    payload = json.loads(target.read_text(encoding="utf-8"))
    assert payload["attachments"] == 0
    assert str(target) in capsys.readouterr().out


def test_list_prints_one_json_line_per_asset(registry: ServiceRegistry, capsys) -> None:
    assert registry.catalog is not None
    registry.catalog.add(canonical_url="https://media.example.test/uploads/a.jpg")
    registry.catalog.add(canonical_url="https://video.test/v", kind=AssetKind.EMBED)

    assert cli.main(["list"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert [json.loads(line)["kind"] for line in lines] == ["attachment", "embed"]


def test_missing_command_exits_with_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])

    assert excinfo.value.code == 2
