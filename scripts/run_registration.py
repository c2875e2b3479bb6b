"""
Command line registration session

Loads a source and a target cloud (from files or a synthetic dataset), applies
a pose given on the command line or by centroid auto-alignment, reports the
alignment error and optionally asks the advisory service, renders the scene
and saves the resulting transform.
"""

import sys
import argparse
import logging
from pathlib import Path

# Add the src to the path to import modules
sys.path.append(str(Path(__file__).parent.parent / "src"))

from point_cloud_registration.pipeline.session import RegistrationSession
from point_cloud_registration.preprocessing.datasets import dataset_or_none
from point_cloud_registration.advisory import RegistrationAdvisor, format_advisory
from point_cloud_registration.visualization.point_cloud import PointCloudVisualizer
from point_cloud_registration.utils.config import load_config, AppConfig
from point_cloud_registration.utils.logging import setup_logger, configure_package_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Point Cloud Registration")
    parser.add_argument("--source", type=str, default=None, help="Source (moving) point cloud file (.ply, .pcd, .las, .laz)")
    parser.add_argument("--target", type=str, default=None, help="Target (fixed) point cloud file")
    parser.add_argument(
        "--dataset",
        type=str,
        default=None,
        help="Synthetic dataset instead of files: sphere, cube or torus",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file (defaults to config/default.yaml)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the RMSE estimator and synthetic data.")
    parser.add_argument("--auto-align", action="store_true", help="Match the source centroid to the target centroid.")
    parser.add_argument("--position", type=float, nargs=3, metavar=("X", "Y", "Z"), default=None,
                        help="Source translation")
    parser.add_argument("--rotation", type=float, nargs=3, metavar=("RX", "RY", "RZ"), default=None,
                        help="Source Euler rotation in radians (XYZ order)")
    parser.add_argument("--scale", type=float, default=None, help="Display scale of the source (not part of RMSE)")
    parser.add_argument("--advise", action="store_true", help="Ask the advisory service for an assessment.")
    parser.add_argument("--visualize", action="store_true", help="Render the scene.")
    parser.add_argument("--load-transform", type=str, default=None,
                        help="Start from a 4x4 source transform written by --save-transform.")
    parser.add_argument("--save-transform", type=str, default=None, help="Write the 4x4 source transform to this file.")
    return parser


def main(argv=None) -> int:
    """
    Main function to run a registration session from the command line.
    """
    args = build_parser().parse_args(argv)

    cfg: AppConfig = load_config(args.config)

    log_level = getattr(logging, cfg.logging.level.upper(), logging.INFO)
    logger = setup_logger(__name__, level=log_level, log_file=cfg.logging.file)
    configure_package_logging(log_level, cfg.logging.file)

    session = RegistrationSession(cfg, rng=args.seed)

    dataset = dataset_or_none(args.dataset)
    if dataset is not None:
        session.select_dataset(dataset)
    else:
        if not args.source and not args.target:
            logger.error("Provide --source/--target files or a --dataset")
            return 2
        if args.source and not session.upload_file(args.source, is_source=True):
            logger.error(session.error_message)
            return 1
        if args.target and not session.upload_file(args.target, is_source=False):
            logger.error(session.error_message)
            return 1

    if session.world.is_set:
        logger.info(f"Origin offset applied: {session.world}")

    if args.load_transform:
        try:
            session.load_transform(args.load_transform)
        except (OSError, ValueError) as e:
            logger.error(f"Cannot load transform {args.load_transform}: {e}")
            return 1
    if args.position is not None:
        session.set_position(args.position)
    if args.rotation is not None:
        session.set_rotation(args.rotation)
    if args.scale is not None:
        session.set_transform(session.transform.with_scale(args.scale))
    if args.auto_align and not session.auto_align():
        logger.warning("Auto-align needs both source and target clouds")

    t = session.transform
    logger.info(f"Source points: {session.source.count}, target points: {session.target.count}")
    logger.info(f"Transform: position={t.position}, rotation={t.rotation}, scale={t.scale}")
    rmse = session.rmse
    logger.info(f"Alignment error (RMSE): {rmse:.4f} [{session.alignment_status(rmse).value}]")

    ranges = session.slider_ranges()
    logger.info(
        f"Translation slider range: [{ranges.translation.minimum:.3f}, {ranges.translation.maximum:.3f}] "
        f"step {ranges.translation.step:.4f}"
    )

    if args.advise:
        if not cfg.advisory.enabled:
            logger.warning("Advisory disabled in configuration; skipping")
        else:
            text = session.request_advice(RegistrationAdvisor.from_config(cfg.advisory))
            for line in format_advisory(text):
                if line.paragraph_break:
                    print()
                elif line.bullet:
                    print(f"    {line.text}")
                else:
                    print(line.text)

    if args.save_transform:
        session.save_transform(args.save_transform)

    if args.visualize:
        viz = PointCloudVisualizer.from_config(cfg.visualization, rng=args.seed)
        viz.visualize_registration(
            session.source,
            session.target,
            session.transform,
            camera=session.camera,
            sample_size=cfg.visualization.sample_size,
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
