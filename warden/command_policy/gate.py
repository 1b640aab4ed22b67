"""Two-phase authorization for shell commands."""

import json
import logging
from datetime import datetime
from pathlib import Path

from warden.command_policy.classifier import CommandClassifier
from warden.command_policy.models import CommandVerdict, Tier
from warden.exceptions import ConfirmationRequired, DangerousCommandError

logger = logging.getLogger(__name__)


class CommandGate:
    """Decide whether a command may run now.

    Deny verdicts raise DangerousCommandError. Warn verdicts raise
    ConfirmationRequired unless the call carries ``confirmed=True``, in which
    case an allow verdict is returned for that call only. Confirmations are
    never remembered: the same command needs the flag again next time.

    Usage:
        gate = CommandGate(CommandClassifier())
        try:
            verdict = gate.authorize("rm -rf build")
        except ConfirmationRequired as e:
            ...  # ask, then gate.authorize("rm -rf build", confirmed=True)
    """

    def __init__(
        self,
        classifier: CommandClassifier,
        audit_log_file: Path | None = None,
        session_id: str | None = None,
    ) -> None:
        self._classifier = classifier
        self._audit_log_file = audit_log_file
        self._session_id = session_id

    @property
    def classifier(self) -> CommandClassifier:
        return self._classifier

    def authorize(self, command: str, confirmed: bool = False) -> CommandVerdict:
        """Authorize one execution of ``command``.

        Args:
            command: Raw command string
            confirmed: Caller's explicit confirmation for a warn-tier command

        Returns:
            An allow verdict

        Raises:
            DangerousCommandError: Deny tier, regardless of ``confirmed``
            ConfirmationRequired: Warn tier without confirmation
        """
        verdict = self._classifier.classify(command)

        if verdict.level is Tier.DENY:
            logger.warning("Denied command (%s): %s", verdict.matched_rule, command)
            self._audit(command, verdict, "denied")
            raise DangerousCommandError(
                f"Command blocked: {verdict.reason}",
                session_id=self._session_id,
                rule=verdict.matched_rule,
                command=command,
            )

        if verdict.level is Tier.WARN:
            if not confirmed:
                logger.info("Command needs confirmation (%s): %s", verdict.matched_rule, command)
                raise ConfirmationRequired(
                    verdict.reason,
                    verdict=verdict,
                    session_id=self._session_id,
                    rule=verdict.matched_rule,
                    command=command,
                )
            logger.warning("Confirmed warn-tier command (%s): %s", verdict.matched_rule, command)
            self._audit(command, verdict, "confirmed")
            return verdict.confirmed()

        return verdict

    def _audit(self, command: str, verdict: CommandVerdict, decision: str) -> None:
        """Append one JSON line describing the decision."""
        if self._audit_log_file is None:
            return
        entry = {
            "timestamp": datetime.now().isoformat(),
            "session_id": self._session_id,
            "command": command,
            "decision": decision,
            "verdict": verdict.to_dict(),
        }
        try:
            self._audit_log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._audit_log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=True) + "\n")
        except OSError as e:
            logger.warning("Failed to write command audit entry: %s", e)
