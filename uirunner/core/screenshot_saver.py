"""Failure screenshot file naming and saving."""

from pathlib import Path


class ScreenshotSaver:
    """Save failure screenshots into the results directory."""

    def __init__(self, output_dir: Path, timestamp: str):
        """Initialize saver.

        Args:
            output_dir: Results directory
            timestamp: Run timestamp shared by every artifact of the run
        """
        self._output_dir = Path(output_dir)
        self._timestamp = timestamp

    def get_filename(self, test_name: str) -> str:
        """Generate filename for a failure screenshot.

        Args:
            test_name: Test name (flow file without extension)

        Returns:
            Filename like "login_flow_failure_20251201_143025.png"
        """
        return f"{test_name}_failure_{self._timestamp}.png"

    def path_for(self, test_name: str) -> Path:
        return self._output_dir / self.get_filename(test_name)
