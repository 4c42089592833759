"""Governance messages — MsgVote."""

from __future__ import annotations

import enum
from typing import Any, ClassVar

from tx_composer.messages.base import MessageUnit, parse_int
from tx_composer.messages.encode import EncodeObject
from tx_composer.messages.type_urls import MsgTypeUrl


class VoteOption(enum.IntEnum):
    """Governance vote options (``cosmos.gov.v1beta1.VoteOption``)."""

    VOTE_OPTION_UNSPECIFIED = 0
    VOTE_OPTION_YES = 1
    VOTE_OPTION_ABSTAIN = 2
    VOTE_OPTION_NO = 3
    VOTE_OPTION_NO_WITH_VETO = 4

    @classmethod
    def from_input(cls, value: Any) -> VoteOption:
        """Parse ``yes`` / ``no_with_veto`` / ``VOTE_OPTION_NO`` / ``3``."""
        if isinstance(value, VoteOption):
            return value
        text = str(value).strip().upper().replace(" ", "_")
        if text.isdigit():
            try:
                return cls(int(text))
            except ValueError:
                return cls.VOTE_OPTION_UNSPECIFIED
        if not text.startswith("VOTE_OPTION_"):
            text = f"VOTE_OPTION_{text}"
        return cls.__members__.get(text, cls.VOTE_OPTION_UNSPECIFIED)


class VoteUnit(MessageUnit):
    """Vote on a governance proposal."""

    msg_type = MsgTypeUrl.VOTE
    defaults: ClassVar[dict[str, Any]] = {"proposal_id": "", "option": "yes"}

    def _validate(self, inputs: dict[str, Any]) -> bool:
        if not self._check_positive_int("proposal_id", inputs["proposal_id"], "Proposal ID"):
            return False
        if VoteOption.from_input(inputs["option"]) is VoteOption.VOTE_OPTION_UNSPECIFIED:
            return self._fail("option", "Choose a vote option")
        return True

    def _encode(self, inputs: dict[str, Any]) -> EncodeObject:
        return EncodeObject(
            type_url=self.msg_type,
            value={
                "proposalId": parse_int(inputs["proposal_id"]),
                "voter": self.sender_address,
                "option": VoteOption.from_input(inputs["option"]),
            },
        )
