"""Command-line interface for chester."""

import math
from pathlib import Path

import chess
import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from chester import __version__
from chester.core.configs import load_config
from chester.core.data import PositionDatabase
from chester.core.utils.logging import setup_logging
from chester.nn import PolicyValueNetwork
from chester.search import MCTSEngine, RandomEvaluator, play_game
from chester.search.evaluator import Evaluator
from chester.training import Trainer

app = typer.Typer(
    name="chester",
    help="chester: MCTS with a hand-rolled scoring network",
    add_completion=False,
)
console = Console()


def _random_evaluator(seed: int) -> RandomEvaluator:
    logger.warning("No network given, searching with random scores")
    return RandomEvaluator(seed)


@app.command()
def version() -> None:
    """Print version information."""
    console.print(f"[bold blue]chester[/bold blue] v{__version__}")


@app.command("init-network")
def init_network(
    output: Path = typer.Argument(..., help="Where to write the network JSON"),
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    overrides: list[str] | None = typer.Option(None, "--set", help="Config override, e.g. network.seed=1"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level"),
) -> None:
    """Create a randomly initialized policy/value network."""
    setup_logging(level=log_level)
    experiment = load_config(config, overrides)
    network = PolicyValueNetwork.from_config(experiment.network)
    network.save(output)
    console.print(f"[bold green]Wrote[/bold green] {output}")


@app.command()
def search(
    fen: str = typer.Argument(chess.STARTING_FEN, help="Position to search"),
    network: Path | None = typer.Option(None, "--network", "-n", help="Network JSON file"),
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    overrides: list[str] | None = typer.Option(None, "--set", help="Config override, e.g. search.num_iterations=400"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level"),
    search_log_level: str | None = typer.Option(None, "--search-log-level", help="Log level for the search internals"),
) -> None:
    """Search a position and print the statistics of every legal move."""
    setup_logging(level=log_level, search_level=search_log_level)
    experiment = load_config(config, overrides)

    try:
        board = chess.Board(fen)
    except ValueError as e:
        console.print(f"[red]Invalid FEN:[/red] {e}")
        raise typer.Exit(1) from e

    evaluator: Evaluator
    if network is not None:
        evaluator = PolicyValueNetwork.load(network)
    else:
        evaluator = _random_evaluator(experiment.seed)
    engine = MCTSEngine(evaluator, experiment.search)
    move = engine.select_move(board)
    if move is None:
        console.print("[yellow]No legal moves[/yellow]")
        return

    table = Table(title=f"{engine.name} from {fen}")
    table.add_column("Move")
    table.add_column("N", justify="right")
    table.add_column("Q", justify="right")
    table.add_column("V", justify="right")

    stats = engine.get_root_stats(board)
    for mv, row in sorted(stats.items(), key=lambda kv: -kv[1]["N"]):
        q = "-" if math.isnan(row["Q"]) else f"{row['Q']:.3f}"
        v = "-" if math.isnan(row["V"]) else f"{row['V']:.3f}"
        table.add_row(board.san(mv), str(row["N"]), q, v)

    console.print(table)
    console.print(f"[bold green]Best move:[/bold green] {board.san(move)} ({len(engine.graph)} positions searched)")


@app.command()
def selfplay(
    network: Path | None = typer.Option(None, "--network", "-n", help="Network JSON file"),
    max_moves: int = typer.Option(40, "--max-moves", help="Stop after this many plies"),
    train: bool = typer.Option(False, "--train", help="Train the value head on the search statistics afterwards"),
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    overrides: list[str] | None = typer.Option(None, "--set", help="Config override"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level"),
) -> None:
    """Play one game against itself, reusing the search graph across moves."""
    setup_logging(level=log_level)
    experiment = load_config(config, overrides)

    if train and network is None:
        console.print("[red]--train needs --network[/red]")
        raise typer.Exit(1)

    model = PolicyValueNetwork.load(network) if network is not None else None
    evaluator: Evaluator = model if model is not None else _random_evaluator(experiment.seed)
    engine = MCTSEngine(evaluator, experiment.search)
    record = play_game(engine, engine, max_plies=max_moves)

    console.print(record.to_pgn(engine.name, engine.name), markup=False)
    console.print(
        f"[bold]Result:[/bold] {record.result} ({record.termination.value}), "
        f"{len(engine.graph)} positions in the search graph"
    )

    if train and model is not None and network is not None:
        Trainer(model, experiment.training).train_from_graph(engine.graph)
        model.save(network)
        console.print(f"[bold green]Updated[/bold green] {network}")


@app.command()
def train(
    database: Path | None = typer.Argument(None, help="SQLite position database (default: data.database_path)"),
    network: Path | None = typer.Option(None, "--network", "-n", help="Network to resume from"),
    epochs: int | None = typer.Option(None, "--epochs", "-e", help="Number of epochs"),
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    overrides: list[str] | None = typer.Option(None, "--set", help="Config override, e.g. training.learning_rate=0.01"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level"),
) -> None:
    """Train the network on historical positions."""
    setup_logging(level=log_level)
    experiment = load_config(config, overrides)

    if network is not None:
        model = PolicyValueNetwork.load(network)
    else:
        model = PolicyValueNetwork.from_config(experiment.network)

    database = database if database is not None else Path(experiment.data.database_path)
    with PositionDatabase(database, in_memory=experiment.data.in_memory) as db:
        results = Trainer(model, experiment.training).fit(db, epochs)

    console.print(f"[bold green]Training complete[/bold green]: {results}")


if __name__ == "__main__":
    app()
