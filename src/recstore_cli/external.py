"""External programs and prompts the stores and commands rely on.

Everything that talks to the user or to another process lives here so the
stores stay testable and commands can be exercised with these swapped out.
"""

import shlex
import subprocess
import sys

import httpx
import typer
from bs4 import BeautifulSoup

from .config import get_opener, get_picker_command
from .errors import Cancelled, ExternalCommandError, TitleFetchError

# fzf exits 1 on no match and 130 on ctrl-c/esc; rofi exits 1 on esc.
_PICKER_CANCEL_CODES = {1, 130}

USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) recstore-cli"


def _default_picker(title: str, height: int) -> list[str]:
    if sys.stdin.isatty():
        return ["fzf", "--prompt", f"{title} ", "--height", f"{height}%", "--reverse"]
    return ["rofi", "-dmenu", "-i", "-p", title]


def pick(title: str, listing: str, height: int = 30) -> str:
    """Show `listing` in a fuzzy picker and return the chosen line.

    Raises:
        Cancelled: the user dismissed the picker
        ExternalCommandError: the picker could not run
    """
    custom = get_picker_command()
    args = shlex.split(custom) if custom else _default_picker(title, height)
    try:
        proc = subprocess.run(
            args,
            input=listing,
            stdout=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        raise ExternalCommandError(args[0], f"failed to start: {e}") from e

    if proc.returncode in _PICKER_CANCEL_CODES:
        raise Cancelled()
    if proc.returncode != 0:
        raise ExternalCommandError(args[0], f"exited with code {proc.returncode}")

    chosen = proc.stdout.strip("\n")
    if not chosen.strip():
        raise Cancelled()
    return chosen


def open_url(url: str) -> None:
    """Open `url` with $OPENER (xdg-open by default)."""
    opener = get_opener()
    try:
        proc = subprocess.run([opener, url])
    except OSError as e:
        raise ExternalCommandError(opener, f"failed to start opener command: {e}") from e
    if proc.returncode != 0:
        raise ExternalCommandError(opener, f"exited with code {proc.returncode}")


def copy_to_clipboard(text: str) -> None:
    """Put `text` on the clipboard through xclip."""
    args = ["xclip", "-sel", "clipboard"]
    try:
        proc = subprocess.run(args, input=text, text=True)
    except OSError as e:
        raise ExternalCommandError("xclip", f"failed to start xclip command: {e}") from e
    if proc.returncode != 0:
        raise ExternalCommandError("xclip", "failed to save to clipboard")


def fetch_title(url: str, timeout: float = 10.0) -> str:
    """Download `url` and return the text of its <title> element."""
    try:
        response = httpx.get(
            url,
            follow_redirects=True,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise TitleFetchError(url, str(e)) from e

    soup = BeautifulSoup(response.text, "html.parser")
    if soup.title is None or not soup.title.get_text(strip=True):
        raise TitleFetchError(url, "page has no title")
    return " ".join(soup.title.get_text().split())


def read_line(prompt: str) -> str:
    return typer.prompt(prompt)


def confirm(prompt: str, default: bool = False) -> bool:
    return typer.confirm(prompt, default=default, err=True)
