# wages_api/services/access_policy.py
"""
Row-level access policy.

Every read or write of employees, attendance, wages and role assignments goes
through one predicate per (entity, operation), evaluated against an explicit
``Principal``. The predicate exists in two renderings that must agree:

  allows(principal, entity, op, row)   -> bool, for a single loaded row
  row_filter(principal, entity, op)    -> SQLAlchemy clause, for queries

Rules:
  - admin: read/insert/update/delete on employees, attendance, wages
  - anyone else: read-only on the employee row linked to their login and on
    the attendance/wage rows of that employee; no writes
  - role assignments: readable by their subject and by admins; never writable
    through the policy (grants go through the operator CLI)
  - profiles (the login row itself): read and update by its owner only, admins
    included; never inserted or deleted through the policy
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import FrozenSet, Optional

from sqlalchemy import false, true, select

from wages_api.common.errors import AuthorizationDenied
from wages_api.models.attendance import Attendance
from wages_api.models.employee import Employee
from wages_api.models.security import ROLE_ADMIN, UserRole
from wages_api.models.user import User
from wages_api.models.wage import Wage

log = logging.getLogger(__name__)


class Entity(str, Enum):
    EMPLOYEE = "employee"
    ATTENDANCE = "attendance"
    WAGE = "wage"
    USER_ROLE = "user_role"
    PROFILE = "profile"


class Operation(str, Enum):
    READ = "read"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


MODELS = {
    Entity.EMPLOYEE: Employee,
    Entity.ATTENDANCE: Attendance,
    Entity.WAGE: Wage,
    Entity.USER_ROLE: UserRole,
    Entity.PROFILE: User,
}

_ADMIN_MANAGED = (Entity.EMPLOYEE, Entity.ATTENDANCE, Entity.WAGE)


@dataclass(frozen=True)
class Principal:
    """The acting user for one request. ``user_id`` is None for anonymous callers."""
    user_id: Optional[int]
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return self.user_id is not None and ROLE_ADMIN in self.roles

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls(user_id=None)


def _owner_user_id(entity: Entity, row) -> Optional[int]:
    """User id that owns ``row`` through the employee link, if any."""
    if entity == Entity.EMPLOYEE:
        return row.user_id
    if entity in (Entity.ATTENDANCE, Entity.WAGE):
        emp = row.employee
        return emp.user_id if emp is not None else None
    if entity == Entity.USER_ROLE:
        return row.user_id
    return None


# ---------- single-row predicate ----------

def allows(principal: Principal, entity: Entity, op: Operation, row=None) -> bool:
    """
    Decide one (entity, operation) for ``row``. ``row`` may be None for
    inserts, which are judged on role alone.
    """
    if principal.user_id is None:
        return False

    if entity == Entity.PROFILE:
        if op not in (Operation.READ, Operation.UPDATE) or row is None:
            return False
        return row.id == principal.user_id

    if entity == Entity.USER_ROLE:
        if op != Operation.READ:
            return False
        if principal.is_admin:
            return True
        return row is not None and row.user_id == principal.user_id

    if principal.is_admin:
        return entity in _ADMIN_MANAGED

    if op != Operation.READ or row is None:
        return False
    return _owner_user_id(entity, row) == principal.user_id


def authorize(principal: Principal, entity: Entity, op: Operation, row=None) -> None:
    if not allows(principal, entity, op, row):
        log.info("policy denied %s on %s for user=%s", op.value, entity.value, principal.user_id)
        raise AuthorizationDenied(f"Not allowed to {op.value} {entity.value}")


# ---------- query rendering ----------

def _owned_employee_ids(user_id: int):
    return select(Employee.id).where(Employee.user_id == user_id)


def row_filter(principal: Principal, entity: Entity, op: Operation = Operation.READ):
    """
    SQLAlchemy rendering of ``allows`` for use in WHERE clauses, so a query
    returns exactly the subset of rows the principal may see.
    """
    if principal.user_id is None:
        return false()

    if entity == Entity.PROFILE:
        if op not in (Operation.READ, Operation.UPDATE):
            return false()
        return User.id == principal.user_id

    if entity == Entity.USER_ROLE:
        if op != Operation.READ:
            return false()
        if principal.is_admin:
            return true()
        return UserRole.user_id == principal.user_id

    if principal.is_admin:
        return true() if entity in _ADMIN_MANAGED else false()

    if op != Operation.READ:
        return false()
    if entity == Entity.EMPLOYEE:
        return Employee.user_id == principal.user_id
    if entity == Entity.ATTENDANCE:
        return Attendance.employee_id.in_(_owned_employee_ids(principal.user_id))
    if entity == Entity.WAGE:
        return Wage.employee_id.in_(_owned_employee_ids(principal.user_id))
    return false()


def scoped_query(principal: Principal, entity: Entity, op: Operation = Operation.READ):
    model = MODELS[entity]
    return model.query.filter(row_filter(principal, entity, op))


def get_visible(principal: Principal, entity: Entity, row_id: int):
    """
    Load one row by id through the policy. Rows the principal may not read are
    indistinguishable from missing rows (None).
    """
    return scoped_query(principal, entity).filter(MODELS[entity].id == row_id).first()
