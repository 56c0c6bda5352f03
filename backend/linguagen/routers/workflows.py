"""Lesson workflow router — generate, review, refine and approve lesson drafts."""

from fastapi import APIRouter, Depends, HTTPException

from linguagen.dependencies import get_generator, get_library, get_registry
from linguagen.schemas.workflow import (
    FieldEdit,
    ItemEdit,
    RefineRequest,
    WorkflowCreate,
    WorkflowInputUpdate,
)
from linguagen.services.generator import LessonGenerator
from linguagen.services.library import LessonLibrary
from linguagen.services.workflow import CLOSED, LessonWorkflow, WorkflowRegistry

router = APIRouter(prefix="/api/workflows", tags=["workflows"])


def _get_workflow(workflow_id: str, registry: WorkflowRegistry = Depends(get_registry)) -> LessonWorkflow:
    workflow = registry.get(workflow_id)
    if workflow is None:
        raise HTTPException(status_code=404, detail="Lesson workflow not found")
    return workflow


@router.post("", status_code=201)
def open_workflow(
    body: WorkflowCreate,
    library: LessonLibrary = Depends(get_library),
    generator: LessonGenerator = Depends(get_generator),
    registry: WorkflowRegistry = Depends(get_registry),
):
    """Start a new lesson, or open a saved one (lesson_id) for editing."""
    if body.lesson_id:
        workflow = LessonWorkflow.for_lesson(library, generator, body.lesson_id)
    else:
        workflow = LessonWorkflow.new(library, generator, student_id=body.student_id)
        workflow.set_topic(body.topic)
    return registry.add(workflow).to_dict()


@router.get("/{workflow_id}")
def get_workflow(workflow: LessonWorkflow = Depends(_get_workflow)):
    return workflow.to_dict()


@router.patch("/{workflow_id}")
def update_input(body: WorkflowInputUpdate, workflow: LessonWorkflow = Depends(_get_workflow)):
    if body.topic is not None:
        workflow.set_topic(body.topic)
    if body.student_id is not None:
        workflow.select_student(body.student_id)
    return workflow.to_dict()


@router.post("/{workflow_id}/generate")
async def generate(workflow: LessonWorkflow = Depends(_get_workflow)):
    await workflow.generate()
    return workflow.to_dict()


@router.post("/{workflow_id}/edit")
def edit_field(body: FieldEdit, workflow: LessonWorkflow = Depends(_get_workflow)):
    workflow.edit_field(body.path, body.value)
    return workflow.to_dict()


@router.post("/{workflow_id}/items/replace")
def replace_item(body: ItemEdit, workflow: LessonWorkflow = Depends(_get_workflow)):
    workflow.replace_item(body.path, body.index, body.item)
    return workflow.to_dict()


@router.post("/{workflow_id}/items/insert")
def insert_item(body: ItemEdit, workflow: LessonWorkflow = Depends(_get_workflow)):
    workflow.insert_item(body.path, body.index, body.item)
    return workflow.to_dict()


@router.post("/{workflow_id}/items/remove")
def remove_item(body: ItemEdit, workflow: LessonWorkflow = Depends(_get_workflow)):
    workflow.remove_item(body.path, body.index)
    return workflow.to_dict()


@router.post("/{workflow_id}/refine")
async def refine(body: RefineRequest, workflow: LessonWorkflow = Depends(_get_workflow)):
    explanation = await workflow.refine(body.instruction)
    return {**workflow.to_dict(), "explanation": explanation}


@router.post("/{workflow_id}/approve")
def approve(
    workflow: LessonWorkflow = Depends(_get_workflow),
    registry: WorkflowRegistry = Depends(get_registry),
):
    try:
        return workflow.approve()
    finally:
        if workflow.step == CLOSED:
            registry.discard(workflow.id)


@router.post("/{workflow_id}/cancel")
def cancel(
    workflow: LessonWorkflow = Depends(_get_workflow),
    registry: WorkflowRegistry = Depends(get_registry),
):
    workflow.cancel()
    if workflow.step == CLOSED:
        registry.discard(workflow.id)
    return workflow.to_dict()


@router.delete("/{workflow_id}", status_code=204)
def close_workflow(
    workflow: LessonWorkflow = Depends(_get_workflow),
    registry: WorkflowRegistry = Depends(get_registry),
):
    """Drop an open workflow.  A call still in flight is ignored when it returns."""
    if workflow.step != CLOSED:
        workflow.cancel()
    registry.discard(workflow.id)
