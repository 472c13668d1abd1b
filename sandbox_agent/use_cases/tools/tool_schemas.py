"""
Argument models and specs of the sandbox file tools.
"""

from pydantic import BaseModel, ConfigDict, Field

from sandbox_agent.entities.tool_invocation import ToolName
from sandbox_agent.ports.llm.tools_port import ToolSpec


class ListFilesArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str = Field(
        ..., description="Directory to list, relative to the project root or absolute"
    )


class ReadFilesArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    paths: list[str] = Field(..., min_length=1, description="Files to read")


class CreateFileArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str = Field(..., min_length=1, description="Path of the new file")
    content: str = Field(
        ..., description="Full content of the new file (base64 for binary files)"
    )


class EditFileArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str = Field(..., min_length=1, description="Path of the file to edit")
    content: str = Field(
        ...,
        description=(
            "The edit to apply: the changed code with enough surrounding lines to "
            "locate it; use '// ... existing code ...' for unchanged parts"
        ),
    )
    instruction: str = Field(
        ..., description="One sentence describing the change, in first person"
    )


TOOL_ARGUMENTS: dict[ToolName, type[BaseModel]] = {
    ToolName.LIST_FILES: ListFilesArgs,
    ToolName.READ_FILES: ReadFilesArgs,
    ToolName.CREATE_FILE: CreateFileArgs,
    ToolName.EDIT_FILE: EditFileArgs,
}

TOOL_DESCRIPTIONS: dict[ToolName, str] = {
    ToolName.LIST_FILES: "List the files and directories directly inside a directory.",
    ToolName.READ_FILES: (
        "Read one or more files. Files that cannot be read are left out of the "
        "result. Binary files are returned base64 encoded."
    ),
    ToolName.CREATE_FILE: "Create a new file. Fails if the file already exists.",
    ToolName.EDIT_FILE: (
        "Edit an existing text file by describing the change. Fails if the file "
        "does not exist or is binary."
    ),
}

ASK_TOOLS: tuple[ToolName, ...] = (ToolName.LIST_FILES, ToolName.READ_FILES)
BUILD_TOOLS: tuple[ToolName, ...] = tuple(ToolName)


def tool_spec(name: ToolName) -> ToolSpec:
    return {
        "name": name.value,
        "description": TOOL_DESCRIPTIONS[name],
        "parameters": TOOL_ARGUMENTS[name].model_json_schema(),
    }
