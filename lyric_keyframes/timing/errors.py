class TimingError(ValueError):
    pass


class Unresolvable(TimingError):
    pass


class EmptyAfterCleaning(TimingError):
    pass


class NoUsableRecords(TimingError):
    pass


class ConfigError(ValueError):
    pass
