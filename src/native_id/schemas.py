"""Data models for the native identifier storage."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SecurityId:
    """The platform's own identifier of a tradable instrument.

    Composite of the security code and the board (venue) it trades on.
    Immutable and hashable, so it can key both sides of an index.
    """

    security_code: str
    board_code: str = ""

    def __str__(self) -> str:
        return f"{self.security_code}@{self.board_code}"

    @classmethod
    def parse(cls, text: str) -> "SecurityId":
        """Build a SecurityId from its ``CODE@BOARD`` form.

        Splits on the last ``@`` so security codes may contain one.
        Text without ``@`` yields an empty board code.
        """
        code, sep, board = text.rpartition("@")
        if not sep:
            return cls(security_code=text)
        return cls(security_code=code, board_code=board)
