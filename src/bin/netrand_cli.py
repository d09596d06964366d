#!/usr/bin/env python3
import argparse, logging, sys
from netrand.errors import ConfigurationError
from netrand.generator import Generator
from netrand.pool import close_pool_manager
from netrand.sources import RandomSource

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Enteros aleatorios desde fuentes online (CLI).")
    ap.add_argument("--src", required=True, choices=[s.value for s in RandomSource],
                    help="Proveedor de aleatoriedad.")
    ap.add_argument("--min", type=int, default=0, help="Valor mínimo (incluido).")
    ap.add_argument("--max", type=int, default=255, help="Valor máximo (incluido).")
    ap.add_argument("--count", type=int, default=1, help="Cuántos números generar.")
    ap.add_argument("--out", help="Fichero de salida binario (u32 little-endian). Si no, imprime uno por línea.")
    ap.add_argument("--verbose", action="store_true", help="Log en DEBUG.")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        gen = Generator(args.src, min=args.min, max=args.max)
        vals = gen.get_array(args.count)
    except ConfigurationError as e:
        print(f"[ERR] {e}", file=sys.stderr)
        return 2
    finally:
        close_pool_manager()

    if vals is None:
        print("[ERR] could not get enough random data", file=sys.stderr)
        return 1

    if args.out:
        with open(args.out, "wb") as f:
            f.write(vals.astype("<u4").tobytes())
        print(f"[OK] {len(vals)} values -> {args.out}")
    else:
        for v in vals:
            print(int(v))
    return 0

if __name__ == "__main__":
    sys.exit(main())
