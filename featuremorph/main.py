from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

if __package__ is None or __package__ == "":
    ROOT = Path(__file__).resolve().parent.parent
    if str(ROOT) not in sys.path:
        sys.path.insert(0, str(ROOT))

from featuremorph.configuration import build_config, load_preset, resolve_preset_path
from featuremorph.pipeline import pipeline_from_config


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Feature-based image morphing (Beier-Neely)")
    parser.add_argument("--image1", help="Pfad zum Startbild")
    parser.add_argument("--image2", help="Pfad zum Zielbild")
    parser.add_argument("--segments", help="Datei mit Liniensegment-Paaren")
    parser.add_argument("--output", help="Pfad zum Ausgabebild (PNG/BMP/JPG)")
    parser.add_argument("--time", type=float, help="Morph-Zeitpunkt t in [0, 1]")
    parser.add_argument("--preset", help="Preset-Datei (JSON/YAML) oder Name eines mitgelieferten Presets")
    parser.add_argument("--a", type=float, help="Gewichtsparameter a (> 0)")
    parser.add_argument("--b", type=float, help="Gewichtsparameter b (>= 0)")
    parser.add_argument("--p", type=float, help="Gewichtsparameter p (Längeneinfluss)")
    parser.add_argument("--channels", type=int, choices=[0, 1, 2, 3, 4], help="Kanalanzahl beim Laden (0 = wie Datei)")
    parser.add_argument("--frames", type=int, help="Anzahl Frames für eine Sequenz von t=0 bis t=1")
    parser.add_argument("--output-frame-pattern", help="Dateimuster für Sequenz-Frames, z.B. output/frame_{index:04d}.png")
    parser.add_argument("--video", help="Sequenz zusätzlich als Video (MP4) speichern")
    parser.add_argument("--fps", type=float, help="Bildrate des Videos")
    parser.add_argument("--config-name", help="Name des aktiven Presets")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log-Level")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    preset_data = None
    if args.preset:
        preset_data = load_preset(resolve_preset_path(args.preset))
    cli_args = {k: v for k, v in vars(args).items() if v is not None and k != "preset"}

    log_level = args.log_level or (preset_data or {}).get("log_level", "INFO")
    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = build_config(cli_args, preset_data)
    pipeline = pipeline_from_config(config)
    pipeline.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
