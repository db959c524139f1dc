import pytest

from finesse_trainer.application.progress.service import LearningProgressService
from finesse_trainer.domain.models import CurrentSession, LearningProgress, MasteryCard
from finesse_trainer.domain.pieces import PieceType, parse_moves
from finesse_trainer.infrastructure.persistence.memory import InMemoryProgressRepository


def test_first_pattern_is_new(service):
    target = service.select_next_learning_pattern()
    assert (target.piece, target.column, target.rotation) == (PieceType.Z, 0, 0)
    assert target.moves == (parse_moves("DL DROP"),)


def test_no_new_patterns_without_cards_falls_back_to_random(service):
    target = service.select_next_learning_pattern(introduce_new=False)
    # Random pick over every pattern with rng 0.0
    assert (target.piece, target.column, target.rotation) == (PieceType.Z, 0, 0)


def test_record_result(service, repo, clock):
    card = service.record_result(PieceType.T, 2, 1, True)

    assert card.pattern_id == "T_2_1"
    assert card.success_count == 1
    assert card.last_reviewed_at == clock.now()
    assert card.next_due_at == 1

    p = service.progress
    assert p.global_repetition_count == 1
    assert p.cards["T_2_1"] == card
    assert p.current_session.attempts == 1
    assert p.current_session.correct == 1
    assert p.current_session.patterns_reviewed == frozenset({"T_2_1"})
    assert repo.save_count == 1


def test_record_result_persists_without_session(service, repo):
    service.record_result(PieceType.T, 2, 1, False)
    stored = repo.load()
    assert stored.cards["T_2_1"].fail_count == 1
    assert stored.global_repetition_count == 1
    assert stored.current_session == CurrentSession()


def test_mastery_is_counted_once(service, caplog):
    with caplog.at_level("INFO"):
        for _ in range(5):
            service.record_result(PieceType.O, 4, 0, True)

    assert service.progress.current_session.newly_mastered_count == 1
    assert "Pattern O_4_0 mastered" in caplog.text
    assert service.progress.last_mastered_review_at == 0

    service.record_result(PieceType.O, 4, 0, True)
    assert service.progress.current_session.newly_mastered_count == 1
    # Reviewing an already mastered card marks the count before the review
    assert service.progress.last_mastered_review_at == 5
    assert service.progress.global_repetition_count == 6


def test_selects_due_card_after_all_introduced(rng, clock):
    repo = InMemoryProgressRepository()
    service = LearningProgressService(rng=rng, clock=clock, repository=repo)
    service.record_result(PieceType.T, 0, 0, False)

    target = service.select_next_learning_pattern(introduce_new=False)
    assert (target.piece, target.column, target.rotation) == (PieceType.T, 0, 0)


def test_end_session(service, clock):
    assert service.end_session() is None

    service.record_result(PieceType.T, 0, 0, True)
    service.record_result(PieceType.T, 0, 0, False)
    service.record_result(PieceType.J, 3, 2, True)
    clock.advance(5000)

    record = service.end_session()
    assert record.timestamp == clock.now()
    assert record.total_attempts == 3
    assert record.correct_attempts == 2
    assert record.accuracy == 2 / 3
    assert record.patterns_reviewed == 2
    assert record.new_patterns_mastered == 0

    p = service.progress
    assert p.session_history == (record,)
    assert p.current_session.attempts == 0
    assert p.current_session.started_at == clock.now()


def test_session_history_is_newest_first_and_capped(rng, clock, repo):
    service = LearningProgressService(
        rng=rng, clock=clock, repository=repo, max_session_history=2
    )
    for n in range(1, 4):
        for _ in range(n):
            service.record_result(PieceType.I, 0, 0, True)
        service.end_session()

    history = service.progress.session_history
    assert [r.total_attempts for r in history] == [3, 2]
    assert len(repo.load().session_history) == 2


def test_start_new_session_discards_counters(service, clock):
    service.record_result(PieceType.S, 1, 0, True)
    clock.advance(10)
    service.start_new_session()
    assert service.progress.current_session == CurrentSession(started_at=clock.now())
    assert service.progress.global_repetition_count == 1


def test_load_drops_unknown_patterns(rng, clock, caplog):
    stored = LearningProgress(
        cards={
            "T_0_0": MasteryCard("T_0_0", success_count=1),
            "Z_0_1": MasteryCard("Z_0_1", success_count=1),
        },
        global_repetition_count=2,
    )
    with caplog.at_level("WARNING"):
        service = LearningProgressService(
            rng=rng, clock=clock, repository=InMemoryProgressRepository(stored)
        )

    assert set(service.progress.cards) == {"T_0_0"}
    assert service.progress.global_repetition_count == 2
    assert "Z_0_1" in caplog.text


def test_reset_progress(service, repo):
    service.record_result(PieceType.L, 5, 3, True)
    service.end_session()
    service.reset_progress()

    assert service.progress.cards == {}
    assert service.progress.session_history == ()
    assert service.progress.global_repetition_count == 0
    assert repo.load() == LearningProgress()


def test_overall_stats(service):
    for _ in range(5):
        service.record_result(PieceType.O, 0, 0, True)
    service.record_result(PieceType.O, 1, 0, False)

    stats = service.get_overall_stats()
    assert stats.total_patterns == 162
    assert stats.mastered_count == 1
    assert stats.in_progress_count == 1
    assert stats.not_started_count == 160
    assert stats.total_attempts == 6
    assert stats.overall_accuracy == 5 / 6


def test_pattern_stats(service):
    assert service.get_pattern_stats("T_0_0") is None
    service.record_result(PieceType.T, 0, 0, True)
    service.record_result(PieceType.T, 0, 0, False)

    stats = service.get_pattern_stats("T_0_0")
    assert stats.accuracy == 0.5
    assert stats.attempts == 2
    assert not stats.mastered


def test_mastery_grid(service):
    service.record_result(PieceType.T, 3, 2, True)
    grid = service.get_mastery_grid()

    assert [gp.piece for gp in grid.pieces] == list(PieceType)
    t = next(gp for gp in grid.pieces if gp.piece == PieceType.T)
    rot2 = next(r for r in t.rotations if r.rotation == 2)
    assert rot2.columns[3].accuracy == 1.0
    assert rot2.columns[3].attempts == 1
    assert rot2.columns[0].accuracy == -1.0


def test_without_repository(rng, clock):
    service = LearningProgressService(rng=rng, clock=clock)
    service.record_result(PieceType.T, 0, 0, True)
    assert service.progress.global_repetition_count == 1
    service.reset_progress()
    assert service.progress.cards == {}


def test_equivalent_rotation_is_recorded_under_table_entry(service):
    card = service.record_result(PieceType.Z, 0, 1, False)
    assert card.pattern_id == "Z_0_3"
    assert set(service.progress.cards) == {"Z_0_3"}

    target = service.select_next_learning_pattern(introduce_new=False)
    assert (target.piece, target.column, target.rotation) == (PieceType.Z, 0, 3)

    stats = service.get_overall_stats()
    assert stats.in_progress_count + stats.not_started_count == stats.total_patterns
    z = service.get_mastery_grid().pieces[0]
    rot3 = next(r for r in z.rotations if r.rotation == 3)
    assert rot3.columns[0].attempts == 1


def test_record_result_rejects_placement_outside_table(service, repo):
    with pytest.raises(ValueError, match="T_42_0"):
        service.record_result(PieceType.T, 42, 0, False)

    assert service.progress.cards == {}
    assert service.progress.global_repetition_count == 0
    assert service.progress.current_session.attempts == 0
    assert repo.save_count == 0
