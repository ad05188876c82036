import os
import asyncio
import argparse
import colorsys
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.prompt import Prompt
from rich.progress import Progress, BarColumn, TextColumn
from rich import box

from light_processor.config import load_config
from light_processor.errors import LightProcessorError
from light_processor.processor import LightProcessor


def hsl_swatch(hue: float, saturation: float) -> str:
    """Rich color for a word swatch (lightness fixed at 50%)."""
    r, g, b = colorsys.hls_to_rgb(hue, 0.5, saturation)
    return f"rgb({int(r * 255)},{int(g * 255)},{int(b * 255)})"


def print_error(console: Console, message: str):
    console.print(Panel(Text(message, style="red"), title="Error", border_style="red"))


def stats_table(processor: LightProcessor, top: int = 100) -> Table:
    stats = processor.stats(top=top)
    table = Table(title=f"Word Statistics ({stats['word_count']}/{stats['capacity']})",
                  box=box.SIMPLE, expand=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("word")
    table.add_column("freq", justify="right")
    table.add_column("", justify="center")
    for i, entry in enumerate(stats["top"]):
        swatch = Text("●", style=hsl_swatch(entry["hue"], entry["saturation"]))
        table.add_row(str(i), entry["word"], str(entry["frequency"]), swatch)
    if stats["more"]:
        table.add_row("", f"... and {stats['more']} more words", "", "")
    return table


def ingest_with_progress(console: Console, processor: LightProcessor, path: str) -> bool:
    """Ingest one file behind a progress bar. Returns False on failure."""
    with Progress(TextColumn("[bold]Processing words"), BarColumn(),
                  TextColumn("{task.percentage:>3.0f}%"), console=console) as progress:
        task = progress.add_task(os.path.basename(path), total=100)
        try:
            asyncio.run(processor.ingest_file(
                path, on_progress=lambda p: progress.update(task, completed=p)))
        except LightProcessorError as e:
            print_error(console, str(e))
            return False
    console.print(f"[dim]{len(processor.registry)} words known[/dim]")
    return True


def console_header(console: Console, processor: LightProcessor):
    cfg = processor.config
    title = "[bold cyan]Light-Based Neural Processor[/bold cyan]"
    left = (
        f"[bold white]Words:[/bold white] {len(processor.registry)} / {cfg.capacity}\n"
        f"[dim]Grid {cfg.grid_side}x{cfg.grid_side} • batch {cfg.batch_size}\n{os.getcwd()}[/dim]"
    )
    right = (
        "[bold orange3]Commands[/bold orange3]\n"
        "[white]/load <file>[/white]  [dim]ingest a .txt, .csv or .pdf file[/dim]\n"
        "[white]/stats[/white]        [dim]top words[/dim]\n"
        "[white]/export <file>[/white] [dim]write the encoded grid (float32)[/dim]\n"
        "[white]/save \\[file][/white]  [dim]write a checkpoint[/dim]\n"
        "[dim]Anything else is an input phrase (up to "
        f"{cfg.seed_limit} words).[/dim]"
    )
    table = Table.grid(expand=True)
    table.add_column(justify="left", ratio=1)
    table.add_column(justify="left", ratio=2)
    table.add_row(left, right)
    console.print(Panel(table, title=title, border_style="cyan", box=box.SQUARE))


def chat_ui(console: Console, processor: LightProcessor):
    console.print("")
    while True:
        user_msg = Prompt.ask("[white]>[/white]").strip()
        if user_msg.lower() in {"exit", "quit"}:
            break
        if not user_msg:
            continue

        command, _, arg = user_msg.partition(" ")
        arg = arg.strip()
        if command in {"/stats", "/s"}:
            console.print(stats_table(processor))
            continue
        if command == "/load":
            if not arg:
                console.print("[red]usage: /load <file>[/red]")
                continue
            ingest_with_progress(console, processor, arg)
            continue
        if command == "/export":
            if not arg:
                console.print("[red]usage: /export <file>[/red]")
                continue
            try:
                with open(arg, "wb") as f:
                    f.write(processor.export_bytes())
            except OSError as e:
                print_error(console, f"Could not write grid: {e}")
                continue
            console.print(f"[dim]Grid written to {arg}[/dim]")
            continue
        if command == "/save":
            try:
                processor.save_checkpoint(arg or None)
            except OSError as e:
                print_error(console, f"Could not save checkpoint: {e}")
            continue

        reply = processor.process_input(user_msg)
        console.print(Panel(Text(user_msg, style="white"), border_style="bright_black"))
        console.print(Panel(Text(reply or "[no prediction]", style="bright_blue"),
                            title="Output Phrase", border_style="bright_black"))
        console.print("")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Light-based neural processor console")
    parser.add_argument("--config", type=str, default=None, help="JSON config file")
    parser.add_argument("--checkpoint", type=str, default=None, help="Checkpoint to resume from")
    parser.add_argument("--file", action="append", default=[], help="Document to ingest before chatting (repeatable)")
    parser.add_argument("--grid-side", type=int, default=None, help="Override grid side length")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for word colors")
    parser.add_argument("--no-chat", action="store_true", help="Ingest files, save checkpoint and exit")
    args = parser.parse_args(argv)

    cfg = load_config(args.config)
    if args.grid_side is not None:
        cfg.grid_side = args.grid_side
    if args.seed is not None:
        cfg.seed = args.seed
    processor = LightProcessor(cfg)

    if args.checkpoint:
        processor.load_checkpoint(args.checkpoint)

    console = Console()
    console_header(console, processor)

    for path in args.file:
        ingest_with_progress(console, processor, path)

    if args.no_chat:
        processor.save_checkpoint()
        return 0

    try:
        chat_ui(console, processor)
    except (KeyboardInterrupt, EOFError):
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
