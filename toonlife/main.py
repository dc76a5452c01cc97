"""
Entrada principal ToonLife
Exporta escenas, rasteriza frames sueltos e inspecciona el estado de una
escena en un instante.
"""

import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from .config import load_config
from .director import SceneParser
from .errors import EncoderFailure
from .infrastructure import AssetLoader, AssetResolver, FrameCompositor, scene_asset_refs
from .timeline import audible_clips_at, resolve_frame
from .video import ExportRenderer

logger = logging.getLogger(__name__)
console = Console()


def _export(args, config) -> int:
    scene = SceneParser().load(args.scene)
    output = Path(args.output) if args.output else Path(config.output_dir) / f"{Path(args.scene).stem}.mp4"

    console.print(Panel(
        f"[bold cyan]Exportando {Path(args.scene).name}[/bold cyan]\n"
        f"{scene.duration:.1f}s · {config.export_width}x{config.export_height} @ {config.fps}fps",
        title="ToonLife",
    ))

    renderer = ExportRenderer(config)
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Renderizando...", total=100)
        result = asyncio.run(
            renderer.export(scene, output, on_progress=lambda value: progress.update(task, completed=value))
        )

    failures = renderer.loader.failures
    if failures:
        console.print(f"[yellow]⚠ {len(failures)} assets no disponibles (omitidos)[/yellow]")
    console.print(f"\n[bold green]🎬 Video final: {result}[/bold green]\n")
    return 0


def _frame(args, config) -> int:
    scene = SceneParser().load(args.scene)
    loader = AssetLoader(AssetResolver(config.assets_root), config.sample_rate, config.channels)
    images, _ = scene_asset_refs(scene)
    asyncio.run(loader.preload(images, []))

    frame = resolve_frame(scene, args.time)
    image = FrameCompositor(config).compose(frame, loader.get_image)

    output = Path(args.output or f"frame_{args.time:.2f}.png")
    output.parent.mkdir(parents=True, exist_ok=True)
    image.save(output)
    console.print(f"[green]✓ Frame {args.time:.2f}s guardado en {output}[/green]")
    return 0


def _inspect(args, config) -> int:
    scene = SceneParser().load(args.scene)
    audible = audible_clips_at(scene.audio_clips, args.time)
    frame = resolve_frame(scene, args.time, audible=audible)

    console.print(Panel(
        f"[bold cyan]t = {args.time:.2f}s[/bold cyan] de {scene.duration:.2f}s · "
        f"{len(scene.keyframes)} keyframes · fondo {scene.background}",
        title="Inspección",
    ))

    items = Table(title="Elementos (orden de dibujo)")
    for column in ("kind", "instance", "x", "y", "w", "h", "rot", "z", "contenido"):
        items.add_column(column)
    for item in frame.items:
        items.add_row(
            item.kind, item.instance_id[:8],
            f"{item.x:.1f}", f"{item.y:.1f}", f"{item.width:.1f}", f"{item.height:.1f}",
            f"{item.rotation:.1f}", str(item.z_index),
            item.text if item.kind == "text" else (item.image or ""),
        )
    console.print(items)

    clips = Table(title="Clips audibles")
    for column in ("pista", "nombre", "offset interno", "rate"):
        clips.add_column(column)
    for entry in audible:
        clips.add_row(entry.clip.track.value, entry.clip.name, f"{entry.internal_offset:.3f}s", f"{entry.rate:.3f}")
    console.print(clips)
    return 0


def main(argv=None) -> int:
    "Punto de entrada CLI."
    import argparse

    parser = argparse.ArgumentParser(
        description="ToonLife - Motor de composición y exportación de escenas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="Ruta al YAML de configuración (default: config/config.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Logging detallado")
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Exportar una escena a MP4")
    export_parser.add_argument("scene", help="Archivo JSON de la escena")
    export_parser.add_argument("-o", "--output", help="Ruta del video de salida")

    frame_parser = subparsers.add_parser("frame", help="Rasterizar un frame a PNG")
    frame_parser.add_argument("scene", help="Archivo JSON de la escena")
    frame_parser.add_argument("--time", type=float, default=0.0, help="Instante en segundos")
    frame_parser.add_argument("-o", "--output", help="Ruta de la imagen de salida")

    inspect_parser = subparsers.add_parser("inspect", help="Mostrar elementos y audio en un instante")
    inspect_parser.add_argument("scene", help="Archivo JSON de la escena")
    inspect_parser.add_argument("--time", type=float, default=0.0, help="Instante en segundos")

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    config = load_config(args.config)

    commands = {"export": _export, "frame": _frame, "inspect": _inspect}
    try:
        return commands[args.command](args, config)
    except (ValueError, ValidationError, OSError) as e:
        console.print(f"[red]✗ Error leyendo la escena: {e}[/red]")
        return 1
    except EncoderFailure as e:
        console.print(f"[red]✗ Error de exportación: {e}[/red]")
        if e.stderr:
            console.print(f"[dim]{e.stderr}[/dim]")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelado por el usuario[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
