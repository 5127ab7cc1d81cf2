"""
Notebook models

Pydantic models for the subset of the Jupyter notebook format nbdeck reads:
cell type, cell source and the error/stream outputs of code cells.
Everything else in the file is ignored.
"""

from pathlib import Path
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _lines_split(value: Any) -> Any:
    """nbformat stores multi-line text either as a list of lines or one string"""
    if isinstance(value, str):
        return value.splitlines(keepends=True)
    return value


Lines = Annotated[List[str], BeforeValidator(_lines_split)]


class ErrorOutput(BaseModel):
    """Output of a code cell that raised"""
    output_type: Literal["error"]
    ename: str
    evalue: str


class StreamOutput(BaseModel):
    """Output of a code cell written to stdout/stderr"""
    output_type: Literal["stream"]
    name: str = "stdout"
    text: Lines = Field(default_factory=list)


class OtherOutput(BaseModel):
    """Any other output type (display data, execute results, ...); ignored"""
    model_config = ConfigDict(extra="allow")

    output_type: str = ""


Output = Annotated[
    Union[ErrorOutput, StreamOutput, OtherOutput],
    Field(union_mode="left_to_right"),
]


class Cell(BaseModel):
    """
    One cell of a notebook (a block of the presentation source)

    Attributes:
        cell_type: "markdown", "code" or "raw"
        source: Source lines of the cell, each with its line break
        outputs: Captured outputs of a code cell
    """
    cell_type: str
    source: Lines = Field(default_factory=list)
    outputs: Optional[List[Output]] = None

    def stream_get(self) -> Optional[str]:
        """Text of the first stream output, None if there is none"""
        for output in self.outputs or []:
            if isinstance(output, StreamOutput):
                return "".join(output.text)
        return None

    def error_get(self) -> Optional[str]:
        """'<ename>: <evalue>' of the first error output, None if there is none"""
        for output in self.outputs or []:
            if isinstance(output, ErrorOutput):
                return f"{output.ename}: {output.evalue}"
        return None


class Notebook(BaseModel):
    """
    A whole notebook file

    Attributes:
        cells: All cells in document order
        path: Location of the notebook file (not part of the JSON document)
    """
    cells: List[Cell] = Field(default_factory=list)
    path: Path = Field(default=Path("notebook.ipynb"), exclude=True)
