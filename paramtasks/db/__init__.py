"""Database layer for paramtasks with async SQLAlchemy."""

from paramtasks.db.connection import close_db, get_session, init_db
from paramtasks.db.models import (
    Base,
    CategoryModel,
    GeneratedTaskModel,
    LaborTypeModel,
    MaterialModel,
    TaskLaborModel,
    TaskMaterialModel,
    TaskParameterDependencyModel,
    TaskParameterModel,
    TaskParameterOptionModel,
    TaskTemplateModel,
    UnitModel,
)

__all__ = [
    "Base",
    "CategoryModel",
    "GeneratedTaskModel",
    "LaborTypeModel",
    "MaterialModel",
    "TaskLaborModel",
    "TaskMaterialModel",
    "TaskParameterDependencyModel",
    "TaskParameterModel",
    "TaskParameterOptionModel",
    "TaskTemplateModel",
    "UnitModel",
    "close_db",
    "get_session",
    "init_db",
]
