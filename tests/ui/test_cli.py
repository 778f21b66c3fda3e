from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from cinesource.app import PersistenceOutcome
from cinesource.domain.model import (
    FIELD_SCHEMA,
    EntityKey,
    EntityType,
    FieldName,
    ResolutionState,
    ResolvedRecord,
)
from cinesource.domain.resolution import ResolutionOptions, ResolutionRequest, ResolutionResult
from cinesource.ui import cli as cli_module

if TYPE_CHECKING:
    from collections.abc import Sequence


class _FakeResolve:
    def __init__(self) -> None:
        self.requests: list[ResolutionRequest] = []
        self.options: ResolutionOptions | None = None

    def __call__(
        self,
        requests: Sequence[ResolutionRequest],
        *,
        options: ResolutionOptions | None = None,
    ) -> list[PersistenceOutcome]:
        self.requests.extend(requests)
        self.options = options
        return [
            PersistenceOutcome(
                ResolutionResult(
                    record=ResolvedRecord.empty(request.entity_key),
                    provenance={},
                    conflicts=(),
                    state=ResolutionState.EXHAUSTED,
                )
            )
            for request in requests
        ]


@pytest.fixture
def fake_resolve(monkeypatch: pytest.MonkeyPatch) -> _FakeResolve:
    fake = _FakeResolve()
    monkeypatch.setattr(cli_module, "resolve_entities", fake)
    return fake


def test_resolve_film_defaults_to_every_film_field(
    fake_resolve: _FakeResolve, capsys: pytest.CaptureFixture[str]
) -> None:
    cli_module.main(["resolve", "--film", "Heat", "--year", "1995"])

    (request,) = fake_resolve.requests
    assert request.entity_key == EntityKey.film("Heat", 1995)
    assert request.requested_fields == FIELD_SCHEMA[EntityType.FILM]
    assert fake_resolve.options is None
    payload = json.loads(capsys.readouterr().out)
    assert payload["entity_key"]["title"] == "Heat"
    assert payload["fields"] == {}


def test_resolve_person_with_flags(fake_resolve: _FakeResolve) -> None:
    cli_module.main(
        [
            "resolve",
            "--person",
            "Al Pacino",
            "--tmdb-id",
            "1158",
            "--fields",
            "name, birth_year",
            "--min-accept-confidence",
            "0.6",
            "--max-adapters",
            "2",
            "--override",
        ]
    )

    (request,) = fake_resolve.requests
    assert request.entity_key == EntityKey.person("Al Pacino", tmdb_id=1158)
    assert request.requested_fields == {FieldName.NAME, FieldName.BIRTH_YEAR}
    assert fake_resolve.options == ResolutionOptions(
        min_accept_confidence=0.6, max_adapters_tried=2, override=True
    )


@pytest.mark.parametrize(
    "argv",
    [
        ["resolve", "--film", "Heat", "--fields", "biography"],
        ["resolve", "--film", "Heat", "--fields", "box_office"],
        ["resolve", "--person", "Al Pacino", "--imdb-id", "nm0000199"],
        ["resolve", "--film", "Heat", "--min-accept-confidence", "2"],
    ],
)
def test_invalid_requests_exit_with_usage_error(
    fake_resolve: _FakeResolve, argv: list[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(argv)

    assert excinfo.value.code == 2
    assert fake_resolve.requests == []


def test_film_and_person_are_mutually_exclusive(fake_resolve: _FakeResolve) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["resolve", "--film", "Heat", "--person", "Al Pacino"])

    assert excinfo.value.code == 2


def test_resolution_errors_exit_with_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(*_: object, **__: object) -> None:
        raise RuntimeError("database unreachable")

    monkeypatch.setattr(cli_module, "resolve_entities", broken)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["resolve", "--film", "Heat"])

    assert excinfo.value.code == 1


def test_sweep_cache_command(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[bool] = []
    monkeypatch.setattr(cli_module, "sweep_response_cache", lambda: calls.append(True) or 0)

    cli_module.main(["sweep-cache"])

    assert calls == [True]
