import pathlib
from typing import Union

FilePath = Union[pathlib.Path, str]
