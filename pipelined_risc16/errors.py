class Risc16Error(Exception):
    """Base class for errors raised by this package."""


class ConfigError(Risc16Error, ValueError):
    pass


class AssemblerError(Risc16Error, ValueError):
    def __init__(self, message, lineno=None):
        if lineno is not None:
            message = "line %d: %s" % (lineno, message)
        super().__init__(message)
        self.lineno = lineno


class VerificationError(Risc16Error, AssertionError):
    """The pipeline disagreed with the architectural model.

    `mismatches` holds one human-readable line per disagreement.
    """

    def __init__(self, mismatches):
        self.mismatches = list(mismatches)
        lines = "\n  ".join(self.mismatches)
        super().__init__("%d mismatch(es) against oracle:\n  %s" % (len(self.mismatches), lines))
