class ExitCodes:
    SUCCESS = 0
    ERROR = 1
    NOT_FOUND = 3
    CANCELLED = 130
