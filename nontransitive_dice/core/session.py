"""
session.py
One round of the commit-reveal fair random protocol:
commit -> publish digest -> collect the counterpart's number -> combine -> reveal.
Related modules:
- commitment.py: Produces the commitment published at the start of the session.
- signals.py: Escape/Help answers from the input collector.
- engine.py: Runs one session per randomness-consuming decision.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from .commitment import Commitment, commit
from .signals import Escape, Help


COMMITTED = "COMMITTED"
AWAITING_COUNTERPART = "AWAITING_COUNTERPART"
RESOLVED = "RESOLVED"
ABORTED = "ABORTED"


class GameAborted(Exception):
    """
    Raised when the counterpart answers with the escape input.
    Propagates through the engine; the top level decides how to exit.
    """
    pass


class SessionStateError(RuntimeError):
    """
    Raised when a session method is called in the wrong state (e.g. reveal before resolve, reuse).
    """
    pass


@dataclass(frozen=True)
class Reveal:
    """
    Everything a verifier needs once a session is resolved.
    Fields:
        range (int): Modulus of the session.
        secret (int): The committed number.
        key (bytes): The one-time HMAC key.
        digest (str): The digest published before the counterpart answered.
        counterpart_value (int): The counterpart's contribution.
        result (int): (secret + counterpart_value) mod range.
    """
    range: int
    secret: int
    key: bytes
    digest: str
    counterpart_value: int
    result: int

    @property
    def key_hex(self) -> str:
        return self.key.hex()


class FairRandomSession:
    """
    State machine COMMITTED -> AWAITING_COUNTERPART -> RESOLVED (or ABORTED).
    A session is used for exactly one decision and cannot be restarted.
    """
    def __init__(self, range_: int, key_bytes: int = 32,
                 commit_fn: Callable[[int, int], Commitment] = commit):
        """
        Commit immediately to a secret in [0, range_).
        Args:
            range_ (int): Size of the range.
            key_bytes (int): HMAC key size passed to commit_fn.
            commit_fn (callable): Commitment generator, (range, key_bytes) -> Commitment.
        """
        self.range = range_
        self._commitment = commit_fn(range_, key_bytes)
        self.state = COMMITTED
        self._counterpart_value: Optional[int] = None
        self._result: Optional[int] = None

    @property
    def digest(self) -> str:
        return self._commitment.digest

    def publish(self) -> str:
        """
        Publish the digest and start waiting for the counterpart.
        Returns:
            str: The hex digest.
        """
        if self.state != COMMITTED:
            raise SessionStateError(f"cannot publish in state {self.state}")
        self.state = AWAITING_COUNTERPART
        return self._commitment.digest

    def is_valid_contribution(self, value) -> bool:
        # bool is an int subclass but never a valid number here
        return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < self.range

    def contribute(self, value: int) -> int:
        """
        Combine the counterpart's number with the secret.
        Args:
            value (int): Counterpart's number in [0, range).
        Returns:
            int: (secret + value) mod range.
        Raises:
            ValueError: value is not an int in range; the session keeps waiting.
            SessionStateError: Not waiting for a contribution.
        """
        if self.state != AWAITING_COUNTERPART:
            raise SessionStateError(f"cannot contribute in state {self.state}")
        if not self.is_valid_contribution(value):
            raise ValueError(f"contribution must be an integer in [0, {self.range})")
        self._counterpart_value = value
        self._result = (self._commitment.secret + value) % self.range
        self.state = RESOLVED
        return self._result

    def abort(self) -> None:
        self.state = ABORTED

    def reveal(self) -> Reveal:
        """
        Expose the secret and key so the digest can be recomputed.
        Raises:
            SessionStateError: If the session is not resolved.
        """
        if self.state != RESOLVED:
            raise SessionStateError(f"cannot reveal in state {self.state}")
        c = self._commitment
        return Reveal(range=self.range, secret=c.secret, key=c.key, digest=c.digest,
                      counterpart_value=self._counterpart_value, result=self._result)

    def run(self, collector, prompt: str,
            on_publish: Optional[Callable[[str], None]] = None,
            on_help: Optional[Callable[[], None]] = None,
            on_invalid: Optional[Callable[[object], None]] = None) -> Reveal:
        """
        Run the whole session against an input collector.
        Args:
            collector: Object with request_integer(range, prompt, options=None) -> int | Escape | Help.
            prompt (str): Question shown to the counterpart.
            on_publish (callable): Receives the digest before the collector is asked.
            on_help (callable): Called on Help; the same question is asked again.
            on_invalid (callable): Receives a rejected answer before asking again.
        Returns:
            Reveal: The resolved session.
        Raises:
            GameAborted: The counterpart answered with Escape.
        """
        digest = self.publish()
        if on_publish is not None:
            on_publish(digest)
        while self.state == AWAITING_COUNTERPART:
            answer = collector.request_integer(self.range, prompt)
            if isinstance(answer, Escape):
                self.abort()
                raise GameAborted("counterpart asked to exit")
            if isinstance(answer, Help):
                if on_help is not None:
                    on_help()
                continue
            if not self.is_valid_contribution(answer):
                if on_invalid is not None:
                    on_invalid(answer)
                continue
            self.contribute(answer)
        return self.reveal()
