"""UI module for TorchTime.

This module provides the Streamlit-based interface: a fragment router,
one view per route, and the theme.

Submodules:
    app: Main Streamlit application
    router: Fragment parsing, auth guard and dispatch
    context: Per-rerun AppContext
    views: Render functions per route
    theme: Visual styling

Usage:
    Run the application with:
        streamlit run src/torchtime/ui/app.py

    Or, once installed:
        torchtime
"""

from __future__ import annotations


def run_app() -> None:
    """Run the Streamlit application.

    Note: This launches a subprocess running streamlit.
    """
    import subprocess
    import sys
    from pathlib import Path

    app_path = Path(__file__).parent / "app.py"
    subprocess.run([sys.executable, "-m", "streamlit", "run", str(app_path)], check=False)


__all__ = [
    "run_app",
]
