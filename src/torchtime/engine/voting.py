"""Session proposal, voting and finalization.

A DM proposes candidate time slots for the next session, members vote
yes/maybe/no on each slot, and the DM finalizes one slot, which locks the
proposal and puts a concrete session on the calendar.

Every function here mutates the AppState in place; callers save the
state afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable

from torchtime.core.constants import MAX_LOCATION_LENGTH, MAX_TITLE_LENGTH
from torchtime.core.exceptions import (
    PermissionDeniedError,
    ProposalFinalizedError,
    SchedulingError,
    ValidationError,
)
from torchtime.core.logging import get_logger
from torchtime.core.validation import check_length
from torchtime.models.campaign import (
    Campaign,
    ScheduledSession,
    SessionProposal,
    TimeOption,
)
from torchtime.models.enums import VoteChoice
from torchtime.models.state import AppState


logger = get_logger(__name__)


@dataclass(frozen=True)
class OptionDraft:
    """User input for a new time option, before validation.

    Attributes:
        date: Session day.
        start: Start time.
        end: Optional end time, must be after start.
        location: Meeting place.
    """

    date: date | None
    start: time | None
    end: time | None = None
    location: str = ""


def _require_dm(campaign: Campaign, user_id: str, action: str) -> None:
    if not campaign.is_dm(user_id):
        raise PermissionDeniedError(
            "Only the campaign's DM can do this", user_id=user_id, action=action
        )


def _require_open(proposal: SessionProposal) -> None:
    if proposal.finalized:
        raise ProposalFinalizedError(
            "This session has already been scheduled", proposal_id=proposal.id
        )


def _clean_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Session title is required", field_name="title")
    return check_length(title, MAX_TITLE_LENGTH, field_name="title", label="Session title")


def _session_deleted(state: AppState, proposal: SessionProposal) -> bool:
    # Documents written before sessions were stored have no session ID
    return (
        proposal.scheduled_session_id is not None
        and state.get_session(proposal.scheduled_session_id) is None
    )


def _build_option(draft: OptionDraft, user_id: str) -> TimeOption:
    if draft.date is None or draft.start is None:
        raise ValidationError("Please pick a date and time", field_name="date")
    if draft.end is not None and draft.end <= draft.start:
        raise ValidationError(
            "End time must be after the start time",
            field_name="end",
            invalid_value=draft.end.isoformat(),
        )
    location = check_length(
        (draft.location or "").strip(), MAX_LOCATION_LENGTH, field_name="location", label="Location"
    )
    return TimeOption(
        date=draft.date,
        start=draft.start,
        end=draft.end,
        location=location,
        created_by=user_id,
    )


# =============================================================================
# Proposals
# =============================================================================


def create_proposal(
    state: AppState,
    campaign_id: str,
    user_id: str,
    title: str,
    options: Iterable[OptionDraft] = (),
) -> SessionProposal:
    """Create a session proposal with zero or more candidate times.

    Args:
        state: Application state.
        campaign_id: Campaign the session belongs to.
        user_id: Acting user, must be the campaign's DM.
        title: Session title.
        options: Initial time options.

    Returns:
        The new proposal.

    Raises:
        ValidationError: If the title is empty or too long, or an option is
            incomplete.
        PermissionDeniedError: If the user is not the DM.
    """
    campaign = state.require_campaign(campaign_id)
    _require_dm(campaign, user_id, "create_proposal")

    title = _clean_title(title)

    proposal = SessionProposal(
        campaign_id=campaign.id,
        title=title,
        options=[_build_option(draft, user_id) for draft in options],
    )
    state.proposals.append(proposal)

    logger.info(
        "Proposal created",
        proposal_id=proposal.id,
        campaign_id=campaign.id,
        options=len(proposal.options),
    )
    return proposal


def add_option(
    state: AppState,
    proposal_id: str,
    user_id: str,
    draft: OptionDraft,
) -> TimeOption:
    """Add a candidate time to an open proposal (DM only)."""
    proposal = state.require_proposal(proposal_id)
    _require_dm(state.require_campaign(proposal.campaign_id), user_id, "add_option")
    _require_open(proposal)

    option = _build_option(draft, user_id)
    proposal.options = [*proposal.options, option]

    logger.info("Time option added", proposal_id=proposal.id, option_id=option.id)
    return option


def remove_option(state: AppState, proposal_id: str, option_id: str, user_id: str) -> bool:
    """Remove a candidate time and its votes from an open proposal (DM only).

    Returns:
        True if the option existed.
    """
    proposal = state.require_proposal(proposal_id)
    _require_dm(state.require_campaign(proposal.campaign_id), user_id, "remove_option")
    _require_open(proposal)

    remaining = [o for o in proposal.options if o.id != option_id]
    if len(remaining) == len(proposal.options):
        return False

    proposal.options = remaining
    proposal.votes = {k: v for k, v in proposal.votes.items() if k != option_id}

    logger.info("Time option removed", proposal_id=proposal.id, option_id=option_id)
    return True


def delete_proposal(state: AppState, proposal_id: str, user_id: str) -> None:
    """Delete a proposal (DM only). Sessions it produced are kept."""
    proposal = state.require_proposal(proposal_id)
    _require_dm(state.require_campaign(proposal.campaign_id), user_id, "delete_proposal")

    state.proposals = [p for p in state.proposals if p.id != proposal_id]
    logger.info("Proposal deleted", proposal_id=proposal_id)


# =============================================================================
# Voting
# =============================================================================


def _voting_target(
    state: AppState, proposal_id: str, option_id: str, user_id: str
) -> SessionProposal:
    proposal = state.require_proposal(proposal_id)
    campaign = state.require_campaign(proposal.campaign_id)
    if not campaign.is_member(user_id):
        raise PermissionDeniedError(
            "Only campaign members can vote", user_id=user_id, action="vote"
        )
    _require_open(proposal)
    if proposal.get_option(option_id) is None:
        raise ValidationError(
            "Unknown time option", field_name="option_id", invalid_value=option_id
        )
    return proposal


def cast_vote(
    state: AppState,
    proposal_id: str,
    option_id: str,
    user_id: str,
    choice: VoteChoice,
) -> None:
    """Record a user's vote on one option.

    The user's previous choice on the same option, whatever it was, is
    replaced, so the user ends up in exactly one of yes/maybe/no for that
    option. Casting the same vote twice leaves the state unchanged.

    Raises:
        ProposalFinalizedError: If the proposal is locked.
        PermissionDeniedError: If the user is not a campaign member.
        ValidationError: If the option does not exist.
    """
    proposal = _voting_target(state, proposal_id, option_id, user_id)

    votes = {k: dict(v) for k, v in proposal.votes.items()}
    votes.setdefault(option_id, {})[user_id] = VoteChoice(choice)
    proposal.votes = votes

    logger.info(
        "Vote recorded",
        proposal_id=proposal.id,
        option_id=option_id,
        user_id=user_id,
        choice=str(choice),
    )


def clear_vote(state: AppState, proposal_id: str, option_id: str, user_id: str) -> bool:
    """Remove a user's vote on one option.

    Returns:
        True if the user had voted.
    """
    proposal = _voting_target(state, proposal_id, option_id, user_id)

    option_votes = dict(proposal.votes.get(option_id, {}))
    if option_votes.pop(user_id, None) is None:
        return False

    votes = {k: v for k, v in proposal.votes.items() if k != option_id}
    if option_votes:
        votes[option_id] = option_votes
    proposal.votes = votes

    logger.info("Vote cleared", proposal_id=proposal.id, option_id=option_id, user_id=user_id)
    return True


def toggle_vote(state: AppState, proposal_id: str, option_id: str, user_id: str) -> bool:
    """Flip a user's yes vote on an option.

    A yes is cleared; anything else (no vote, maybe, no) becomes yes.

    Returns:
        True if the user now votes yes.
    """
    proposal = state.require_proposal(proposal_id)
    if proposal.vote_of(option_id, user_id) is VoteChoice.YES:
        clear_vote(state, proposal_id, option_id, user_id)
        return False
    cast_vote(state, proposal_id, option_id, user_id, VoteChoice.YES)
    return True


def rank_options(proposal: SessionProposal) -> list[TimeOption]:
    """Order options best first.

    Most yes votes wins; ties go to more maybe votes, then the earliest
    start.
    """
    return sorted(
        proposal.options,
        key=lambda o: (
            -proposal.count(o.id, VoteChoice.YES),
            -proposal.count(o.id, VoteChoice.MAYBE),
            o.starts_at,
        ),
    )


# =============================================================================
# Finalization & Scheduling
# =============================================================================


def finalize(
    state: AppState,
    proposal_id: str,
    user_id: str,
    option_index: int | None = None,
) -> ScheduledSession:
    """Lock a proposal on one option and schedule the session.

    Args:
        state: Application state.
        proposal_id: Proposal to finalize.
        user_id: Acting user, must be the campaign's DM.
        option_index: Index of the chosen option; None picks the
            best-ranked one.

    Returns:
        The scheduled session. Finalizing again on the same option returns
        the session created the first time.

    Raises:
        PermissionDeniedError: If the user is not the DM.
        SchedulingError: If there are no options or the index is out of range.
        ProposalFinalizedError: If already finalized on a different option.
    """
    proposal = state.require_proposal(proposal_id)
    campaign = state.require_campaign(proposal.campaign_id)
    _require_dm(campaign, user_id, "finalize")

    if not proposal.options:
        raise SchedulingError(
            "No times proposed yet", details={"proposal_id": proposal.id}
        )

    if option_index is None:
        if proposal.finalized:
            option_index = proposal.chosen_index
        else:
            option_index = proposal.options.index(rank_options(proposal)[0])
    elif not 0 <= option_index < len(proposal.options):
        raise SchedulingError(
            "Time option index out of range",
            details={"proposal_id": proposal.id, "option_index": option_index},
        )

    if proposal.finalized:
        if option_index != proposal.chosen_index:
            raise ProposalFinalizedError(
                "This session has already been scheduled for another time",
                proposal_id=proposal.id,
            )
        existing = state.get_session(proposal.scheduled_session_id)
        if existing is not None:
            return existing
        # Session entry was deleted; recreate it from the locked option
        session = _session_from(proposal, proposal.options[option_index])
        state.sessions.append(session)
        proposal.scheduled_session_id = session.id
        return session

    option = proposal.options[option_index]
    session = _session_from(proposal, option)
    state.sessions.append(session)

    proposal.chosen_index = option_index
    proposal.finalized = True
    proposal.scheduled_session_id = session.id

    logger.info(
        "Proposal finalized",
        proposal_id=proposal.id,
        session_id=session.id,
        starts_at=session.starts_at.isoformat(),
    )
    return session


def _session_from(proposal: SessionProposal, option: TimeOption) -> ScheduledSession:
    return ScheduledSession(
        campaign_id=proposal.campaign_id,
        title=proposal.title,
        starts_at=option.starts_at,
        ends_at=option.ends_at,
        location=option.location,
        proposal_id=proposal.id,
    )


def schedule_session(
    state: AppState,
    campaign_id: str,
    user_id: str,
    title: str,
    starts_at: datetime | None,
    *,
    ends_at: datetime | None = None,
    location: str = "",
) -> ScheduledSession:
    """Put a session on the calendar directly, without a vote (DM only)."""
    campaign = state.require_campaign(campaign_id)
    _require_dm(campaign, user_id, "schedule_session")

    title = _clean_title(title)
    if starts_at is None:
        raise ValidationError("Please pick a date and time", field_name="starts_at")
    if ends_at is not None and ends_at <= starts_at:
        raise ValidationError("End time must be after the start time", field_name="ends_at")
    location = check_length(
        (location or "").strip(), MAX_LOCATION_LENGTH, field_name="location", label="Location"
    )

    session = ScheduledSession(
        campaign_id=campaign.id,
        title=title,
        starts_at=starts_at,
        ends_at=ends_at,
        location=location,
    )
    state.sessions.append(session)

    logger.info("Session scheduled", session_id=session.id, campaign_id=campaign.id)
    return session


def delete_session(state: AppState, session_id: str, user_id: str) -> bool:
    """Remove a scheduled session (DM only).

    A finalized proposal stays locked but no longer lists its session;
    finalizing it again on the same option puts the session back.
    """
    session = state.get_session(session_id)
    if session is None:
        return False
    _require_dm(state.require_campaign(session.campaign_id), user_id, "delete_session")

    state.sessions = [s for s in state.sessions if s.id != session_id]
    logger.info("Session deleted", session_id=session_id)
    return True


def list_scheduled_sessions(state: AppState, campaign_id: str) -> list[ScheduledSession]:
    """List a campaign's sessions, soonest first.

    Stored sessions and sessions implied by finalized proposals are merged;
    entries with the same start minute and location are shown once.
    """
    candidates = [s for s in state.sessions if s.campaign_id == campaign_id]
    for proposal in state.proposals:
        if proposal.campaign_id != campaign_id:
            continue
        option = proposal.chosen_option
        if option is None or _session_deleted(state, proposal):
            continue
        candidates.append(_session_from(proposal, option))

    seen: set[tuple[datetime, str]] = set()
    unique: list[ScheduledSession] = []
    for session in candidates:
        if session.dedup_key in seen:
            continue
        seen.add(session.dedup_key)
        unique.append(session)

    return sorted(unique, key=lambda s: s.starts_at)


def proposals_for_campaign(state: AppState, campaign_id: str) -> list[SessionProposal]:
    """Proposals of a campaign, open ones first."""
    proposals = [p for p in state.proposals if p.campaign_id == campaign_id]
    return sorted(proposals, key=lambda p: p.finalized)


__all__ = [
    "OptionDraft",
    "create_proposal",
    "add_option",
    "remove_option",
    "delete_proposal",
    "cast_vote",
    "clear_vote",
    "toggle_vote",
    "rank_options",
    "finalize",
    "schedule_session",
    "delete_session",
    "list_scheduled_sessions",
    "proposals_for_campaign",
]
