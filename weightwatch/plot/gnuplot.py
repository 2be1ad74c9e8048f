import logging
import subprocess
from pathlib import Path

from weightwatch.errors import PlotExecutionError, PlotToolMissingError

logger = logging.getLogger(__name__)


class GnuplotRunner:
    """Runs gnuplot with a script on stdin and reports where the image went."""

    def __init__(self, executable: str = "gnuplot", timeout: float = 5.0, retries: int = 1):
        self.executable = executable
        self.timeout = timeout
        self.retries = retries

    def run(self, script: str, output: Path) -> Path:
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)

        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                proc = subprocess.run(
                    [self.executable],
                    input=script,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                )
            except FileNotFoundError as e:
                raise PlotToolMissingError(self.executable) from e
            except subprocess.TimeoutExpired as e:
                logger.warning(
                    "%s timed out after %ss (attempt %d/%d)",
                    self.executable, self.timeout, attempt, attempts,
                )
                if attempt == attempts:
                    raise PlotExecutionError(
                        f"{self.executable} did not finish within {self.timeout}s"
                    ) from e
                continue
            break

        if proc.returncode != 0:
            logger.error("%s exited with %d: %s", self.executable, proc.returncode, proc.stderr.strip())
            raise PlotExecutionError(f"{self.executable} exited with status {proc.returncode}", proc.stderr)
        if not output.exists():
            raise PlotExecutionError(f"{self.executable} finished but produced no image at {output}", proc.stderr)
        logger.debug("Rendered %s", output)
        return output
