class FlowGraphError(Exception):
    pass


class ConfigurationError(FlowGraphError):
    pass


class ParseError(FlowGraphError):
    pass


class DataSourceError(FlowGraphError):
    pass


class TransportError(DataSourceError):
    pass
