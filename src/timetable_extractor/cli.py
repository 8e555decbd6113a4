from __future__ import annotations

import argparse
import logging
import sys
import uuid
from pathlib import Path
from typing import List, Optional

from .analytics import analytics_text, build_report
from .debug import DirectoryDebugSink
from .errors import TimetableError
from .exporters import entries_to_csv
from .grid_detector import GridConfig
from .main import NO_ANALYTICS, load_pixels, prime, read_entries
from .ocr_utils import StaticDetector, TesseractDetector
from .parser import detections_from_json

log = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconstruye una tabla de horarios a partir de una imagen y reporta días anómalos."
    )
    parser.add_argument("image", help="Imagen PNG de la tabla de horarios.")
    parser.add_argument("--detections", help="JSON con detecciones OCR ya calculadas (formato TextDetections). Si se omite, se ejecuta Tesseract.")
    parser.add_argument("--primed-out", help="Ruta opcional para guardar la imagen limpia enviada al OCR.")
    parser.add_argument("--csv", help="Ruta opcional para exportar las entradas reconstruidas.")
    parser.add_argument("--debug-dir", help="Directorio donde guardar imagen y OCR si el escaneo falla.")
    parser.add_argument("--message-id", help="Identificador usado en logs y archivos de depuración.")
    parser.add_argument("--tolerance", type=int, default=0, help="Distancia máxima por canal al comparar colores (default: 0).")
    parser.add_argument("--lang", default="eng", help="Idioma OCR para Tesseract (default: eng).")
    parser.add_argument("--psm", type=int, default=6, help="Tesseract page segmentation mode (default: 6).")
    parser.add_argument("--oem", type=int, default=3, help="Tesseract OCR engine mode (default: 3).")
    parser.add_argument("--loglevel", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.loglevel, format="%(asctime)s - %(levelname)s - %(message)s")

    message_id = args.message_id or Path(args.image).stem or uuid.uuid4().hex
    config = GridConfig(tolerance=args.tolerance)
    sink = DirectoryDebugSink(args.debug_dir) if args.debug_dir else None

    try:
        if args.detections:
            detector = StaticDetector(detections_from_json(args.detections))
        else:
            detector = TesseractDetector(lang=args.lang, psm=args.psm, oem=args.oem)

        pixels = load_pixels(args.image)
        primed = prime(pixels, config)
        if args.primed_out:
            Path(args.primed_out).parent.mkdir(parents=True, exist_ok=True)
            Path(args.primed_out).write_bytes(primed.data)
            log.info("Imagen limpia guardada en %s", args.primed_out)

        entries = read_entries(pixels, detector, message_id=message_id, debug_sink=sink,
                               config=config, primed=primed)
    except FileNotFoundError as exc:
        log.error("No se encontró el archivo de entrada: %s", exc.filename or args.image)
        return 2
    except TimetableError as exc:
        log.error("No se pudieron obtener las analíticas: %s", exc)
        print(NO_ANALYTICS)
        return 1
    except Exception as e:
        log.error(f"Ocurrió un error inesperado: {e}", exc_info=True)
        return 1

    if args.csv:
        entries_to_csv(entries, args.csv)
        log.info("CSV guardado en %s", args.csv)

    print(analytics_text(build_report(entries)), end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())
