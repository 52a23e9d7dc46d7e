"""Errors raised while building vulnerability indices.

Every error carries the domain it was raised for (when known) so a failing
pipeline run points at the offending domain, column or unit.
"""


class VulnerabilityIndexError(Exception):
    """Base class for all index-construction errors."""

    def __init__(self, message, domain=None):
        super().__init__(message)
        self.message = message
        self.domain = domain

    def with_domain(self, domain):
        """Return self tagged with `domain` unless a domain is already set."""
        if self.domain is None:
            self.domain = domain
        return self

    def __str__(self):
        if self.domain:
            return f"[{self.domain}] {self.message}"
        return self.message


class MissingIndicatorError(VulnerabilityIndexError, KeyError):
    """A requested indicator column is absent from the input table."""

    def __init__(self, columns, domain=None, message=None):
        self.columns = list(columns)
        if message is None:
            message = f"indicator column(s) not found: {self.columns}"
        super().__init__(message, domain)


class IncompleteIndicatorError(MissingIndicatorError):
    """Indicator values are missing (NaN) for some units."""

    def __init__(self, columns, units, domain=None):
        self.units = list(units)
        shown = self.units[:10]
        more = f" (+{len(self.units) - 10} more)" if len(self.units) > 10 else ""
        message = f"missing values in {list(columns)} for units {shown}{more}"
        super().__init__(columns, domain, message)


class DegenerateColumnError(VulnerabilityIndexError, ValueError):
    """A column has zero standard deviation and cannot be standardized."""

    def __init__(self, column, domain=None):
        self.column = column
        super().__init__(f"column '{column}' is constant (zero standard deviation)", domain)


class DegenerateRangeError(VulnerabilityIndexError, ValueError):
    """A column has max == min and cannot be min-max normalized."""

    def __init__(self, column, value=None, domain=None):
        self.column = column
        self.value = value
        super().__init__(f"column '{column}' has zero range (all values == {value})", domain)


class SingularMatrixError(VulnerabilityIndexError, ArithmeticError):
    """The covariance matrix cannot be fully decomposed."""

    def __init__(self, reason, domain=None):
        self.reason = reason
        super().__init__(f"covariance matrix is singular: {reason}", domain)


class UnitMismatchError(VulnerabilityIndexError, ValueError):
    """Domain indices do not share the same set of units."""

    def __init__(self, name, missing=(), extra=(), domain=None):
        self.name = name
        self.missing = sorted(missing)
        self.extra = sorted(extra)
        parts = []
        if self.missing:
            parts.append(f"missing units {self.missing[:10]}")
        if self.extra:
            parts.append(f"unexpected units {self.extra[:10]}")
        super().__init__(f"index '{name}' is not aligned: " + ", ".join(parts), domain)


class DuplicateUnitError(VulnerabilityIndexError, ValueError):
    """The unit identifier is not unique."""

    def __init__(self, units, domain=None):
        self.units = sorted(units)
        super().__init__(f"duplicate unit ids: {self.units[:10]}", domain)


class InvalidWeightsError(VulnerabilityIndexError, ValueError):
    pass


class RetentionPolicyError(VulnerabilityIndexError, ValueError):
    pass


class ConfigError(VulnerabilityIndexError, ValueError):
    pass
