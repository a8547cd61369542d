"""Thai Word Break - command line entry point.

Usage:
    python -m src.main book.epub
    python -m src.main book.epub -o out.epub --mode wbr --preview-dir data/preview

Sending SIGUSR1 to the process pauses the run before the next member;
sending it again continues.
"""

import argparse
import logging
import signal
import sys
import threading
from collections.abc import Callable
from pathlib import Path

import yaml

from src.config import Config
from src.epub.classifier import parse_tag_list
from src.epub.errors import WordBreakError
from src.epub.markup import MarkupTransformer
from src.epub.models import PipelineResult, ResumeHandle
from src.epub.pipeline import ArchivePipeline
from src.epub.preview import collect_original_markup, write_previews
from src.util.fs_util import FSUtil
from src.wordbreak.break_inserter import BreakMode
from src.wordbreak.dictionary import DictionaryIndex
from src.wordbreak.dictionary_source import DictionaryFetchError, DictionarySource

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/config.yaml")
OUTPUT_SUFFIX = ".thaiwb.epub"


class PauseController:
    """Pause/continue toggle driven from a signal handler.

    ``toggle`` runs inside the signal handler on the main thread and takes no
    locks; a waiting run is resumed from a short-lived thread.
    """

    def __init__(self) -> None:
        self._paused = False
        self._handle: ResumeHandle | None = None

    def is_paused(self) -> bool:
        return self._paused

    def register(self, handle: ResumeHandle) -> None:
        """Remember the handle of a pausing run.

        A continue that arrived after the pause check but before this call is
        honoured by resuming the handle at once.
        """
        self._handle = handle
        if not self._paused:
            handle.resume()

    def toggle(self) -> bool:
        """Flip the paused flag; continuing also releases a pending pause.

        Returns:
            The new paused state.
        """
        self._paused = not self._paused
        if self._paused:
            logger.info("Paused")
            return True

        handle, self._handle = self._handle, None
        if handle is not None:
            threading.Thread(target=handle.resume, name="resume-run", daemon=True).start()
        logger.info("Processing…")
        return False


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="thai-wordbreak",
        description="Insert word-break opportunities into Thai text inside an EPUB",
    )
    parser.add_argument("input", type=Path, metavar="input.epub")
    parser.add_argument("-o", "--output", type=Path, help=f"Output EPUB (default: <input>{OUTPUT_SUFFIX})")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to config.yaml")
    parser.add_argument("--mode", choices=[mode.value for mode in BreakMode], help="Override the break mode")
    parser.add_argument("--skip-tags", help="Comma-separated elements to leave untouched (overrides config)")
    parser.add_argument("--dict-file", type=Path, help="Local word list (overrides config)")
    parser.add_argument("--dict-url", help="Remote word list URL (overrides config)")
    parser.add_argument("--refresh-dict", action="store_true", help="Fetch the remote word list even if cached")
    parser.add_argument("--preview-dir", type=Path, help="Write rewritten markup members here for inspection")
    parser.add_argument(
        "--show-original", action="store_true", help="Write the original markup to the preview directory instead"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def default_output_path(input_path: Path) -> Path:
    """Derive ``<name>.thaiwb.epub`` next to the input file."""
    name = input_path.name
    if name.lower().endswith(".epub"):
        name = name[: -len(".epub")]
    return input_path.with_name(f"{name}{OUTPUT_SUFFIX}")


def build_dictionary(config: Config, args: argparse.Namespace) -> DictionaryIndex:
    """Load the word list and build the dictionary index.

    Raises:
        DictionaryFetchError: If no word list can be obtained.
    """
    dict_config = config.get_dictionary_config()
    source = DictionarySource(
        url=args.dict_url or dict_config.url,
        local_path=args.dict_file or config.getDictionaryLocalPath(),
        cache_dir=config.getDictionaryCacheDir(),
        cache_days=dict_config.cache_days,
        timeout_seconds=dict_config.timeout_seconds,
    )
    return DictionaryIndex.from_word_list(source.load(refresh=args.refresh_dict))


def build_pipeline(
    config: Config,
    args: argparse.Namespace,
    index: DictionaryIndex,
    *,
    pause_controller: PauseController | None = None,
    on_progress: Callable[[float], None] | None = None,
) -> ArchivePipeline:
    """Wire the markup transformer and archive pipeline from config and flags."""
    mode = BreakMode(args.mode) if args.mode else config.getBreakMode()
    skip_tags = parse_tag_list(args.skip_tags) if args.skip_tags is not None else config.getSkipTags()

    transformer = MarkupTransformer(
        index,
        mode=mode,
        skip_tags=skip_tags,
        policy=config.getSerializationPolicy(),
    )
    return ArchivePipeline(
        transformer,
        markup_extensions=config.getMarkupExtensions(),
        on_progress=on_progress,
        is_paused=pause_controller.is_paused if pause_controller else None,
        on_resume_handle=pause_controller.register if pause_controller else None,
    )


def make_progress_logger() -> Callable[[float], None]:
    """Build a progress callback that logs each new whole percentage."""
    last_percent = -1

    def log_progress(progress: float) -> None:
        nonlocal last_percent
        percent = round(progress * 100)
        if percent != last_percent:
            last_percent = percent
            logger.info("Processing: %d%%", percent)

    return log_progress


def process_epub_file(input_path: Path, output_path: Path, pipeline: ArchivePipeline) -> PipelineResult:
    """Rewrite one EPUB file and save the result.

    The output file is only written once the whole run has succeeded.

    Raises:
        FileNotFoundError: If the input does not exist.
        WordBreakError: If the run fails.
    """
    data = FSUtil.read_bytes_file(input_path)
    result = pipeline.run(data)
    FSUtil.write_bytes_file(output_path, result.archive_bytes, create_parents=True)
    logger.info("Saved → %s", output_path)
    return result


def _install_pause_signal(controller: PauseController) -> None:
    if not hasattr(signal, "SIGUSR1"):
        return
    signal.signal(signal.SIGUSR1, lambda _signum, _frame: controller.toggle())


def main(argv: list[str] | None = None) -> int:
    """Run the word-break pipeline on one EPUB file."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    input_path: Path = args.input
    if not input_path.name.lower().endswith(".epub"):
        logger.error("Please choose an .epub file: %s", input_path)
        return 1
    if not input_path.is_file():
        logger.error("Input file not found: %s", input_path)
        return 1
    output_path: Path = args.output or default_output_path(input_path)

    try:
        config = Config(args.config)
    except (FileNotFoundError, KeyError, ValueError, yaml.YAMLError) as exc:
        logger.error("Failed to load configuration: %s", exc)
        return 1

    try:
        index = build_dictionary(config, args)
    except DictionaryFetchError as exc:
        logger.error("Dictionary unavailable: %s", exc)
        return 1

    controller = PauseController()
    _install_pause_signal(controller)
    pipeline = build_pipeline(
        config,
        args,
        index,
        pause_controller=controller,
        on_progress=make_progress_logger(),
    )

    logger.info("Processing %s", input_path)
    try:
        result = process_epub_file(input_path, output_path, pipeline)
    except WordBreakError as exc:
        logger.error("Failed: %s", exc)
        return 1

    if args.preview_dir is not None:
        if args.show_original:
            originals = collect_original_markup(FSUtil.read_bytes_file(input_path), config.getMarkupExtensions())
            write_previews(args.preview_dir, originals, show_markers=False)
        else:
            write_previews(args.preview_dir, result.transformed, show_markers=True)

    fallbacks = result.fallback_members
    if fallbacks:
        logger.warning("%d member(s) kept their original content: %s", len(fallbacks), ", ".join(fallbacks))
    logger.info("Processing complete: %d member(s) rewritten", len(result.transformed))
    return 0


if __name__ == "__main__":
    sys.exit(main())
