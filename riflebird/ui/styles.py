# styles.py
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

RIFLEBIRD_THEME = Theme(
    {
        "rb.text": "grey85",
        "rb.border": "dark_orange3",
        "rb.accent": "bold #ffaa44",
        "success": "bold green3",
        "failure": "bold red3",
        "dim": "dim grey70",
    }
)

# The shared console instance
console = Console(theme=RIFLEBIRD_THEME)


def create_panel(content, title="Riflebird"):
    return Panel(
        content,
        title=f"[rb.border]{title}[/]",
        title_align="left",
        border_style="rb.border",
        box=box.ROUNDED,
        padding=(1, 2),
    )


def render_error(target: Console, message: str, hint: str = "") -> None:
    """Uniform error box for anything that reaches the top level."""
    body = Text(message, style="failure")
    if hint:
        body.append(f"\n\nHint: {hint}", style="dim")
    target.print(
        Panel(
            body,
            title="[bold red]Error[/]",
            title_align="left",
            border_style="red3",
            box=box.ROUNDED,
            padding=(1, 2),
        )
    )
