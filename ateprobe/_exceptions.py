class ConfigurationError(ValueError):
    """
    Raised when experiment parameters are invalid.

    Validation always happens before the random stream is seeded or drawn
    from, so a rejected configuration never consumes any draws. Invalid
    values are reported, never clamped.
    """
    pass


class NumericalAnomalyWarning(RuntimeWarning):
    """
    Emitted when one or more repetitions produced a non-finite estimate or
    variance. The affected values are kept in the repetition series and
    propagate into the summary statistics rather than being dropped.
    """
    pass
