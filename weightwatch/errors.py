class WeightWatchError(Exception):
    """Base class for every failure the web layer reports to the client."""

    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(WeightWatchError):
    http_status = 400


class TemplateSubstitutionError(WeightWatchError):
    def __init__(self, tokens):
        self.tokens = sorted(set(tokens))
        super().__init__(f"No value for template token(s): {', '.join(self.tokens)}")


TemplateError = TemplateSubstitutionError


class StoreWriteError(WeightWatchError):
    pass


class PlotError(WeightWatchError):
    pass


class PlotToolMissingError(PlotError):
    def __init__(self, executable: str):
        self.executable = executable
        super().__init__(
            f"Plotting tool '{executable}' not found. "
            "Install gnuplot (e.g. 'apt install gnuplot' or 'brew install gnuplot') "
            "or point WEIGHTWATCH_GNUPLOT at the binary."
        )


class PlotExecutionError(PlotError):
    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
