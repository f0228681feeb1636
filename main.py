import argparse
import sys

import numpy as np

from geometry.geom_io import load_data, parse_geometry, save_geometry
from runtime.gradient_check import check_gradient
from runtime.logging_config import setup_logging

logger = None


def _print_properties(scene) -> None:
    topo = scene.topology
    print(f"vertices:        {len(topo.vertices)}")
    print(f"edges:           {len(topo.unique_edges)}")
    print(f"faces:           {len(topo.faces)}")
    print(f"euler char:      {topo.euler_characteristic()}")
    print(f"closed:          {topo.is_closed()}")
    print(f"boundary loops:  {len(topo.boundary_loops())}")
    print(f"embedding:       {scene.embedding!r}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Evaluate the energy of a mesh embedding scene"
    )
    parser.add_argument("-i", "--input", required=True, help="Scene YAML/JSON file")
    parser.add_argument(
        "-o", "--output", default=None, help="Write the scene back out (YAML/JSON)"
    )
    parser.add_argument("--log", default=None, help="Optional log file")
    parser.add_argument(
        "--log-debug",
        action="store_true",
        help="Write debug records to the log file while the console stays at INFO",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress console logging"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable verbose debug logging"
    )
    parser.add_argument(
        "--properties",
        action="store_true",
        help="Print mesh counts (V, E, F, Euler characteristic) and exit",
    )
    parser.add_argument(
        "--check-gradient",
        action="store_true",
        help="Compare the analytic gradient against central differences",
    )
    parser.add_argument(
        "--stochastic",
        type=float,
        default=None,
        metavar="FRACTION",
        help="Also report the norm of one stochastic gradient sample",
    )
    args = parser.parse_args(argv)

    global logger
    logger = setup_logging(
        args.log, quiet=args.quiet, debug=args.debug, file_debug=args.log_debug
    )

    try:
        data = load_data(args.input)
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1
    scene = parse_geometry(data)

    if args.properties:
        _print_properties(scene)
        return 0

    total = scene.build_total_energy()
    constraints = scene.build_constraints()
    emb = scene.embedding
    logger.info("Scene %s: %r", args.input, total)

    vel = np.zeros_like(emb.pos)
    constraints.enforce_all(emb.pos, vel, emb.N)

    grad = np.zeros_like(emb.pos)
    total.gradient(emb, grad)
    print(f"energy:          {total.value(emb):.12g}")
    print(f"terms:           {total.term_count()}")
    print(f"|grad|:          {np.linalg.norm(grad):.6g}")

    if args.stochastic is not None:
        seed = scene.global_parameters.get("seed")
        total.stochastic_gradient(emb, grad, args.stochastic, rng=seed)
        print(f"|stoch grad|:    {np.linalg.norm(grad):.6g}")

    if args.check_gradient:
        err = check_gradient(total, emb)
        print(f"max rel error:   {err:.3e}")

    if args.output:
        save_geometry(scene, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
