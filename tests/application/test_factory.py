from finesse_trainer.application.config import resolve_config
from finesse_trainer.application.factory import (
    get_practice_session,
    get_progress_repository,
    get_progress_service,
)
from finesse_trainer.application.practice import PracticeMode
from finesse_trainer.domain.pieces import PieceType
from finesse_trainer.infrastructure.persistence.json_store import JsonProgressRepository
from finesse_trainer.infrastructure.persistence.memory import InMemoryProgressRepository


def test_repository_selection(mock_home):
    config = resolve_config()
    repo = get_progress_repository(config)
    assert isinstance(repo, JsonProgressRepository)
    assert repo.path == config.progress_file

    assert isinstance(get_progress_repository(config, persist=False), InMemoryProgressRepository)


def test_progress_service_persists_to_file(mock_home):
    config = resolve_config()
    service = get_progress_service(config)
    service.record_result(PieceType.T, 0, 0, True)

    assert config.progress_file.exists()
    reloaded = get_progress_service(config)
    assert reloaded.progress.cards["T_0_0"].success_count == 1


def test_practice_session_from_config(mock_home, rng, clock, repo):
    config = resolve_config({"mode": "s_only", "retry_on_fault": True})
    session = get_practice_session(config, rng=rng, clock=clock, repository=repo)

    assert session.mode == PracticeMode.S_ONLY
    assert session.retry_on_fault
    assert session.next_target().piece == PieceType.S
