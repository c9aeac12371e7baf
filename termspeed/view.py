"""Frame text for each phase of the run."""

from io import StringIO

from .gauge import COLORS, render_dual_speedometer, render_history, render_speedometer
from .state import RunState, TestPhase


def _server_line(output, prefix, state):
    if state.server_label:
        output.write(f"{COLORS['bold']}{COLORS['green']}{prefix}: {state.server_label}{COLORS['reset']}\n\n")


def render_frame(state: RunState, chart_width: int = 50, chart_height: int = 8) -> str:
    output = StringIO()
    output.write(f"{COLORS['title']} termspeed - Speed Test {COLORS['reset']}\n\n")

    phase = state.phase
    if phase is TestPhase.INIT:
        output.write("Initializing speed test...\n")
        output.write("Getting server location...\n\n")
        output.write(render_speedometer(0))

    elif phase is TestPhase.PING:
        output.write("Testing connection to server...\n\n")
        _server_line(output, "Server", state)
        output.write(render_speedometer(0))
        if state.ping > 0:
            output.write(f"\nPing: {state.ping:.1f} ms\n")
        else:
            output.write("\nTesting ping...")

    elif phase is TestPhase.DOWNLOADING:
        output.write("Testing download speed...\n\n")
        _server_line(output, "Connected to", state)
        output.write(render_dual_speedometer(state.displayed_value, 0))
        output.write(f"\nDownload Speed: {state.download_speed:.2f} Mbps\n")
        if state.ping > 0:
            output.write(f"Ping: {state.ping:.1f} ms\n")
        output.write(render_history(state.history.snapshot(len(state.history)),
                                    height=chart_height, width=chart_width))

    elif phase is TestPhase.UPLOADING:
        output.write("Testing upload speed...\n\n")
        _server_line(output, "Connected to", state)
        output.write(render_dual_speedometer(state.download_speed, state.displayed_value))
        output.write(f"\nDownload: {state.download_speed:.2f} Mbps\n")
        output.write(f"Upload: {state.upload_speed:.2f} Mbps\n")
        if state.ping > 0:
            output.write(f"Ping: {state.ping:.1f} ms\n")

    elif phase is TestPhase.COMPLETE:
        output.write("Speed test complete!\n\n")
        _server_line(output, "Tested via", state)
        output.write(render_dual_speedometer(state.download_speed, state.upload_speed))
        output.write(f"\nDownload: {state.download_speed:.2f} Mbps\n")
        output.write(f"Upload: {state.upload_speed:.2f} Mbps\n")
        output.write(f"Ping: {state.ping:.1f} ms\n")
        output.write(f"Test Duration: {state.duration or 0.0:.1f}s\n")
        output.write("\nPress 'r' to run again")

    elif phase is TestPhase.ERROR:
        output.write("Error occurred:\n")
        output.write(f"{COLORS['red']}{state.last_error}{COLORS['reset']}\n")
        output.write("\nPress 'r' to try again")

    output.write("\n\nPress 'q' to quit")
    return output.getvalue()
