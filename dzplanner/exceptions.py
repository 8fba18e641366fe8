class PlannerError(Exception):
    """Base exception for all planner errors"""
    pass


class ConfigurationError(PlannerError, ValueError):
    """Jump settings that cannot describe a real jump"""
    def __init__(self, message: str, field: str = None):
        """
        Args:
            field: name of the offending setting, if a single one
        """
        self.field = field
        super().__init__(message)


class InvalidRangeError(PlannerError, ValueError):
    """Height band with non-finite limits or upper <= lower"""
    pass
