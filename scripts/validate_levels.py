"""Script to check that every level file under the data directory decodes. This should be run after adding levels."""

from pathlib import Path

from tqdm import tqdm

from connectdots_src.dots.errors import LevelError
from connectdots_src.dots.level import load_level_file
from connectdots_src.util.config import BASE, configure_logging, get_key

DATA_PATH = BASE.parent / str(get_key("levels.dir", "data"))
LEVEL_FILES = sorted(DATA_PATH.glob("*/*.json"))


def check_level(path: Path) -> str | None:
    """Return an error message for a bad level file, or None if it is fine."""
    try:
        level = load_level_file(path)
    except LevelError as e:
        return str(e)
    if path.parent.name != str(level.size):
        return f"declares size {level.size} but lives under {path.parent.name}/"
    return None


if __name__ == "__main__":
    configure_logging()
    bad = 0
    for file in tqdm(LEVEL_FILES, desc="Checking levels", unit="level"):
        problem = check_level(file)
        if problem is not None:
            tqdm.write(f"{file.relative_to(DATA_PATH)}: {problem}")
            bad += 1

    print(f"Total levels checked: {len(LEVEL_FILES)}")
    print(f"Found {bad} invalid level files.")
