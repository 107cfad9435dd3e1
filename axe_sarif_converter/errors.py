class ConversionError(Exception):
    pass


class UnsupportedInputShape(ConversionError, ValueError):
    pass


class MalformedFinding(ConversionError, ValueError):
    pass


class BaselineError(ConversionError, RuntimeError):
    pass


class BaselineToolLaunchError(BaselineError):
    pass


class BaselineToolExecutionError(BaselineError):
    def __init__(self, exit_code, output):
        super().__init__(f"SARIF Multitool failed with exit code {exit_code}. Full output:\n{output}")
        self.exit_code = exit_code
        self.output = output


class BaselineResultParseError(BaselineError):
    pass
