"""
Helper functions for file and directory paths used in FootyExport.
"""

from pathlib import Path
from typing import Union

from footyexport.config import LOCAL_DATA_DIR
from footyexport.data.season import SeasonKey, SourceKind

PathLike = Union[str, Path]


def get_local_source_path(
    season: SeasonKey,
    kind: SourceKind,
    data_dir: PathLike | None = None,
) -> Path:
    """
    Return the path of a local football.json document.

    Parameters
    ----------
    season : SeasonKey
        Season, country and league to address.
    kind : SourceKind
        Which document (clubs or rounds).
    data_dir : str | Path | None
        Root of the local tree, or None for the default from config.

    Returns
    -------
    Path
        Full path to the JSON document.
    """
    root = Path(data_dir) if data_dir is not None else LOCAL_DATA_DIR
    return root / season.source_path(kind)
