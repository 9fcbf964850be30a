"""Pydantic models for the JSON API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from task_list_prototype.journey.state_machine import TaskStatus


class ApiTask(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: str
    title: str
    status: TaskStatus
    depends_on: list[str] = Field(default_factory=list, alias="dependsOn")


class ApiTaskList(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tasks: list[ApiTask]
    completed_count: int = Field(alias="completedCount")
    total_tasks: int = Field(alias="totalTasks")
