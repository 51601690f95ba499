"""Tests for session proposals, voting and finalization."""

from __future__ import annotations

from datetime import date, datetime, time

import pytest

from torchtime.core.exceptions import (
    EntityNotFoundError,
    PermissionDeniedError,
    ProposalFinalizedError,
    SchedulingError,
    ValidationError,
)
from torchtime.engine.voting import (
    OptionDraft,
    add_option,
    cast_vote,
    clear_vote,
    create_proposal,
    delete_proposal,
    delete_session,
    finalize,
    list_scheduled_sessions,
    proposals_for_campaign,
    rank_options,
    remove_option,
    schedule_session,
    toggle_vote,
)
from torchtime.models.enums import VoteChoice


@pytest.fixture
def proposal(state, campaign, dm_user, option_drafts):
    return create_proposal(state, campaign.id, dm_user.id, "Session 1", option_drafts)


class TestCreateProposal:
    """Tests for proposal creation."""

    def test_creates_options(self, state, campaign, dm_user, option_drafts) -> None:
        proposal = create_proposal(state, campaign.id, dm_user.id, "  Session 1 ", option_drafts)

        assert proposal.title == "Session 1"
        assert len(proposal.options) == 3
        assert proposal.options[0].starts_at == datetime(2025, 3, 7, 19, 0)
        assert proposal.options[0].location == "Morgan's place"
        assert proposal.finalized is False
        assert state.proposals == [proposal]

    def test_no_options_allowed(self, state, campaign, dm_user) -> None:
        proposal = create_proposal(state, campaign.id, dm_user.id, "Later")

        assert proposal.options == []

    def test_player_cannot_propose(self, state, campaign, player_user) -> None:
        with pytest.raises(PermissionDeniedError):
            create_proposal(state, campaign.id, player_user.id, "Mine")

    def test_empty_title_rejected(self, state, campaign, dm_user) -> None:
        with pytest.raises(ValidationError):
            create_proposal(state, campaign.id, dm_user.id, "   ")

    def test_incomplete_option_rejected(self, state, campaign, dm_user) -> None:
        with pytest.raises(ValidationError):
            create_proposal(
                state, campaign.id, dm_user.id, "S", [OptionDraft(date(2025, 1, 1), None)]
            )

    def test_end_before_start_rejected(self, state, campaign, dm_user) -> None:
        draft = OptionDraft(date(2025, 1, 1), time(20, 0), time(19, 0))

        with pytest.raises(ValidationError) as exc_info:
            create_proposal(state, campaign.id, dm_user.id, "S", [draft])

        assert exc_info.value.details["field_name"] == "end"

    def test_long_title_rejected(self, state, campaign, dm_user) -> None:
        with pytest.raises(ValidationError) as exc_info:
            create_proposal(state, campaign.id, dm_user.id, "x" * 201)

        assert exc_info.value.details["field_name"] == "title"
        assert state.proposals == []

    def test_unknown_campaign(self, state, dm_user) -> None:
        with pytest.raises(EntityNotFoundError):
            create_proposal(state, "nope", dm_user.id, "S")


class TestOptions:
    """Tests for adding and removing candidate times."""

    def test_add_option(self, state, proposal, dm_user) -> None:
        option = add_option(
            state, proposal.id, dm_user.id, OptionDraft(date(2025, 3, 10), time(19, 0))
        )

        assert proposal.options[-1] == option
        assert option.created_by == dm_user.id

    def test_remove_option_drops_votes(self, state, proposal, dm_user, player_user) -> None:
        option = proposal.options[0]
        cast_vote(state, proposal.id, option.id, player_user.id, VoteChoice.YES)

        assert remove_option(state, proposal.id, option.id, dm_user.id) is True
        assert proposal.get_option(option.id) is None
        assert option.id not in proposal.votes

    def test_remove_unknown_option(self, state, proposal, dm_user) -> None:
        assert remove_option(state, proposal.id, "missing", dm_user.id) is False

    def test_long_location_rejected(self, state, proposal, dm_user) -> None:
        draft = OptionDraft(date(2025, 3, 10), time(19, 0), None, "L" * 201)

        with pytest.raises(ValidationError) as exc_info:
            add_option(state, proposal.id, dm_user.id, draft)

        assert exc_info.value.details["field_name"] == "location"
        assert len(proposal.options) == 3

    def test_player_cannot_add(self, state, proposal, player_user) -> None:
        with pytest.raises(PermissionDeniedError):
            add_option(state, proposal.id, player_user.id, OptionDraft(date(2025, 3, 10), time(19)))


class TestVoting:
    """Tests for casting and clearing votes."""

    def test_vote_buckets_are_exclusive(self, state, proposal, player_user) -> None:
        """Test that a new vote moves the user out of their old bucket."""
        option = proposal.options[0]

        cast_vote(state, proposal.id, option.id, player_user.id, VoteChoice.YES)
        cast_vote(state, proposal.id, option.id, player_user.id, VoteChoice.NO)

        buckets = proposal.buckets(option.id)
        assert buckets[VoteChoice.YES] == []
        assert buckets[VoteChoice.NO] == [player_user.id]
        assert buckets[VoteChoice.MAYBE] == []

    def test_repeat_vote_is_idempotent(self, state, proposal, player_user) -> None:
        option = proposal.options[0]

        cast_vote(state, proposal.id, option.id, player_user.id, VoteChoice.MAYBE)
        snapshot = proposal.model_dump()
        cast_vote(state, proposal.id, option.id, player_user.id, VoteChoice.MAYBE)

        assert proposal.model_dump() == snapshot
        assert proposal.count(option.id, VoteChoice.MAYBE) == 1

    def test_votes_are_per_option(self, state, proposal, player_user) -> None:
        first, second, _ = proposal.options

        cast_vote(state, proposal.id, first.id, player_user.id, VoteChoice.YES)
        cast_vote(state, proposal.id, second.id, player_user.id, VoteChoice.NO)

        assert proposal.vote_of(first.id, player_user.id) is VoteChoice.YES
        assert proposal.vote_of(second.id, player_user.id) is VoteChoice.NO

    def test_dm_can_vote(self, state, proposal, dm_user) -> None:
        option = proposal.options[1]

        cast_vote(state, proposal.id, option.id, dm_user.id, "yes")

        assert proposal.vote_of(option.id, dm_user.id) is VoteChoice.YES

    def test_non_member_cannot_vote(self, state, proposal, second_player) -> None:
        with pytest.raises(PermissionDeniedError):
            cast_vote(state, proposal.id, proposal.options[0].id, second_player.id, VoteChoice.YES)

    def test_unknown_option(self, state, proposal, player_user) -> None:
        with pytest.raises(ValidationError):
            cast_vote(state, proposal.id, "missing", player_user.id, VoteChoice.YES)

    def test_clear_vote(self, state, proposal, player_user) -> None:
        option = proposal.options[0]
        cast_vote(state, proposal.id, option.id, player_user.id, VoteChoice.YES)

        assert clear_vote(state, proposal.id, option.id, player_user.id) is True
        assert proposal.vote_of(option.id, player_user.id) is None
        assert clear_vote(state, proposal.id, option.id, player_user.id) is False

    def test_toggle_vote(self, state, proposal, player_user) -> None:
        option = proposal.options[0]

        assert toggle_vote(state, proposal.id, option.id, player_user.id) is True
        assert proposal.vote_of(option.id, player_user.id) is VoteChoice.YES
        assert toggle_vote(state, proposal.id, option.id, player_user.id) is False
        assert proposal.vote_of(option.id, player_user.id) is None


class TestRanking:
    """Tests for option ranking."""

    def test_yes_then_maybe_then_earliest(
        self, state, proposal, dm_user, player_user
    ) -> None:
        first, second, third = proposal.options

        cast_vote(state, proposal.id, third.id, player_user.id, VoteChoice.YES)
        cast_vote(state, proposal.id, second.id, dm_user.id, VoteChoice.YES)
        cast_vote(state, proposal.id, second.id, player_user.id, VoteChoice.MAYBE)

        assert [o.id for o in rank_options(proposal)] == [second.id, third.id, first.id]

    def test_no_votes_orders_by_start(self, proposal) -> None:
        ranked = rank_options(proposal)

        assert ranked == sorted(proposal.options, key=lambda o: o.starts_at)


class TestFinalize:
    """Tests for finalization."""

    def test_finalize_creates_session(self, state, proposal, dm_user) -> None:
        session = finalize(state, proposal.id, dm_user.id, 1)

        assert proposal.finalized is True
        assert proposal.chosen_index == 1
        assert proposal.scheduled_session_id == session.id
        assert session.starts_at == datetime(2025, 3, 8, 18, 30)
        assert session.ends_at is None
        assert session.location == "Game store"
        assert session.title == "Session 1"
        assert state.sessions == [session]

    def test_finalize_defaults_to_best_option(
        self, state, proposal, dm_user, player_user
    ) -> None:
        cast_vote(state, proposal.id, proposal.options[2].id, player_user.id, VoteChoice.YES)

        finalize(state, proposal.id, dm_user.id)

        assert proposal.chosen_index == 2

    def test_refinalize_same_option_is_idempotent(self, state, proposal, dm_user) -> None:
        first = finalize(state, proposal.id, dm_user.id, 0)
        second = finalize(state, proposal.id, dm_user.id, 0)

        assert first.id == second.id
        assert len(state.sessions) == 1

    def test_refinalize_other_option_rejected(self, state, proposal, dm_user) -> None:
        finalize(state, proposal.id, dm_user.id, 0)

        with pytest.raises(ProposalFinalizedError):
            finalize(state, proposal.id, dm_user.id, 1)

    def test_player_cannot_finalize(self, state, proposal, player_user) -> None:
        with pytest.raises(PermissionDeniedError):
            finalize(state, proposal.id, player_user.id, 0)
        assert proposal.finalized is False

    def test_no_options(self, state, campaign, dm_user) -> None:
        empty = create_proposal(state, campaign.id, dm_user.id, "Empty")

        with pytest.raises(SchedulingError):
            finalize(state, empty.id, dm_user.id)

    def test_index_out_of_range(self, state, proposal, dm_user) -> None:
        with pytest.raises(SchedulingError):
            finalize(state, proposal.id, dm_user.id, 7)

    def test_votes_locked_after_finalize(self, state, proposal, dm_user, player_user) -> None:
        finalize(state, proposal.id, dm_user.id, 0)

        with pytest.raises(ProposalFinalizedError):
            cast_vote(state, proposal.id, proposal.options[1].id, player_user.id, VoteChoice.YES)
        with pytest.raises(ProposalFinalizedError):
            add_option(state, proposal.id, dm_user.id, OptionDraft(date(2025, 4, 1), time(19)))


class TestScheduledSessions:
    """Tests for direct scheduling and the merged session list."""

    def test_schedule_directly(self, state, campaign, dm_user) -> None:
        session = schedule_session(
            state, campaign.id, dm_user.id, "One-shot", datetime(2025, 5, 1, 18, 0),
            location=" Library ",
        )

        assert session.proposal_id is None
        assert session.location == "Library"
        assert list_scheduled_sessions(state, campaign.id) == [session]

    def test_schedule_requires_start(self, state, campaign, dm_user) -> None:
        with pytest.raises(ValidationError):
            schedule_session(state, campaign.id, dm_user.id, "One-shot", None)

    def test_schedule_long_location_rejected(self, state, campaign, dm_user) -> None:
        with pytest.raises(ValidationError):
            schedule_session(
                state,
                campaign.id,
                dm_user.id,
                "One-shot",
                datetime(2025, 4, 1, 18),
                location="L" * 201,
            )

        assert state.sessions == []

    def test_player_cannot_schedule(self, state, campaign, player_user) -> None:
        with pytest.raises(PermissionDeniedError):
            schedule_session(state, campaign.id, player_user.id, "X", datetime(2025, 5, 1, 18))

    def test_list_merges_and_deduplicates(self, state, campaign, proposal, dm_user) -> None:
        """Test that a finalized proposal and its stored session show once."""
        finalize(state, proposal.id, dm_user.id, 0)
        schedule_session(
            state, campaign.id, dm_user.id, "Duplicate", datetime(2025, 3, 7, 19, 0, 42),
            location="MORGAN'S PLACE",
        )
        schedule_session(state, campaign.id, dm_user.id, "Earlier", datetime(2025, 2, 1, 18, 0))

        sessions = list_scheduled_sessions(state, campaign.id)

        assert [s.title for s in sessions] == ["Earlier", "Session 1"]

    def test_deleted_finalized_session_stays_deleted(
        self, state, campaign, proposal, dm_user
    ) -> None:
        session = finalize(state, proposal.id, dm_user.id, 2)

        assert delete_session(state, session.id, dm_user.id) is True
        assert state.sessions == []
        assert list_scheduled_sessions(state, campaign.id) == []
        assert proposal.finalized is True

    def test_refinalize_restores_deleted_session(self, state, campaign, proposal, dm_user) -> None:
        session = finalize(state, proposal.id, dm_user.id, 2)
        delete_session(state, session.id, dm_user.id)

        restored = finalize(state, proposal.id, dm_user.id)

        assert restored.id != session.id
        listed = list_scheduled_sessions(state, campaign.id)
        assert [s.id for s in listed] == [restored.id]
        assert listed[0].starts_at == datetime(2025, 3, 9, 14, 0)

    def test_finalized_proposal_without_session_id_listed(
        self, state, campaign, proposal, dm_user
    ) -> None:
        finalize(state, proposal.id, dm_user.id, 2)
        state.sessions = []
        proposal.scheduled_session_id = None

        listed = list_scheduled_sessions(state, campaign.id)

        assert [s.starts_at for s in listed] == [datetime(2025, 3, 9, 14, 0)]
        assert listed[0].proposal_id == proposal.id

    def test_list_is_per_campaign(self, state, campaign, dm_user) -> None:
        from torchtime.models.campaign import Campaign

        other = Campaign(name="Other", dm_id=dm_user.id)
        state.campaigns.append(other)
        schedule_session(state, other.id, dm_user.id, "Elsewhere", datetime(2025, 5, 1, 18))

        assert list_scheduled_sessions(state, campaign.id) == []


class TestProposalLifecycle:
    def test_open_proposals_first(self, state, campaign, dm_user, option_drafts) -> None:
        done = create_proposal(state, campaign.id, dm_user.id, "Done", option_drafts)
        finalize(state, done.id, dm_user.id, 0)
        open_one = create_proposal(state, campaign.id, dm_user.id, "Open", option_drafts)

        assert proposals_for_campaign(state, campaign.id) == [open_one, done]

    def test_delete_proposal_keeps_session(self, state, proposal, dm_user) -> None:
        session = finalize(state, proposal.id, dm_user.id, 0)

        delete_proposal(state, proposal.id, dm_user.id)

        assert state.get_proposal(proposal.id) is None
        assert state.get_session(session.id) is not None
