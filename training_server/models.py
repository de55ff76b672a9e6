#!/usr/bin/env python3
"""
Database models for the training class portal.

Schema:
- User: Local users with roles (admin/trainer/student)
- Course: Course definition with the blueprints students may deploy
- TrainingClass: Cohort of students tied to a course and a date window
- Student: Class member with provisioning credentials, permissions and apps
- BlueprintPermission: Per-student, per-blueprint VM action flags
- StudentApp: Reference to an application owned on the provisioning service

A class and its child rows form one aggregate. TrainingClass.lock_version is
the optimistic concurrency version for the whole aggregate.
"""

import os
from datetime import datetime
from typing import Optional

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import text
from werkzeug.security import check_password_hash, generate_password_hash

# Initialize SQLAlchemy (will be bound to Flask app in create_app)
db = SQLAlchemy()

ROLES = ('admin', 'trainer', 'student')


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class User(db.Model):
    """Local user account with role-based access."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='student')  # admin, trainer, student
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def set_password(self, password: str) -> None:
        """Hash and store password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify password against stored hash."""
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'username': self.username,
            'role': self.role,
            'createdAt': _isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<User {self.username} ({self.role})>'


class Course(db.Model):
    """Course definition; classes run a course for a date window."""
    __tablename__ = 'courses'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    blueprints = db.relationship('CourseBlueprint', back_populates='course',
                                 cascade='all, delete-orphan', order_by='CourseBlueprint.id')

    def find_blueprint(self, bp_id: str) -> Optional['CourseBlueprint']:
        return next((bp for bp in self.blueprints if bp.bp_id == str(bp_id)), None)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'blueprints': [bp.to_dict() for bp in self.blueprints],
        }

    def __repr__(self):
        return f'<Course {self.name}>'


class CourseBlueprint(db.Model):
    """Blueprint offered by a course, as students should see it."""
    __tablename__ = 'course_blueprints'

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False, index=True)
    bp_id = db.Column(db.String(64), nullable=False)  # Blueprint id on the provisioning service
    name = db.Column(db.String(120), nullable=True)
    display_for_students = db.Column(db.String(120), nullable=True)
    description = db.Column(db.Text, nullable=True)

    course = db.relationship('Course', back_populates='blueprints')

    def to_dict(self) -> dict:
        return {
            'id': self.bp_id,
            'name': self.name,
            'displayForStudents': self.display_for_students,
            'description': self.description,
        }


class TrainingClass(db.Model):
    """A cohort of students running a course between two dates."""
    __tablename__ = 'training_classes'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=True, index=True)
    start_date = db.Column(db.DateTime, nullable=True)
    end_date = db.Column(db.DateTime, nullable=True)
    lock_version = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    course = db.relationship('Course')
    students = db.relationship('Student', back_populates='training_class',
                               cascade='all, delete-orphan', order_by='Student.id')

    __mapper_args__ = {
        'version_id_col': lock_version,
    }

    def find_student(self, student_id: int) -> Optional['Student']:
        """Return the student row with the given id, or None."""
        return next((s for s in self.students if s.id == student_id), None)

    def find_student_by_user_id(self, user_id: int) -> Optional['Student']:
        """Return the student row linked to the given user, or None."""
        return next((s for s in self.students if s.user_id == user_id), None)

    def touch(self) -> None:
        """Mark the class row dirty so the next flush bumps lock_version.

        Child-only changes (apps, permissions) do not update the class row on
        their own, so they would not be version checked without this.
        """
        self.updated_at = datetime.utcnow()

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'courseId': self.course_id,
            'startDate': _isoformat(self.start_date),
            'endDate': _isoformat(self.end_date),
            'version': self.lock_version,
            'students': [s.to_dict() for s in self.students],
        }

    def __repr__(self):
        return f'<TrainingClass {self.name}>'


class Student(db.Model):
    """Class membership of a user, with credentials for the provisioning service."""
    __tablename__ = 'students'

    id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey('training_classes.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    provisioning_username = db.Column(db.String(120), nullable=True)
    provisioning_password = db.Column(db.String(256), nullable=True)  # Sent as-is to the provider

    training_class = db.relationship('TrainingClass', back_populates='students')
    user = db.relationship('User')
    blueprint_permissions = db.relationship('BlueprintPermission', back_populates='student',
                                            cascade='all, delete-orphan',
                                            order_by='BlueprintPermission.id')
    apps = db.relationship('StudentApp', back_populates='student',
                           cascade='all, delete-orphan', order_by='StudentApp.id')

    __table_args__ = (
        db.UniqueConstraint('class_id', 'user_id', name='uix_class_user'),
    )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'userId': self.user_id,
            'user': self.user.to_dict() if self.user else None,
            'provisioningCredentials': {
                'username': self.provisioning_username,
            },
            'blueprintPermissions': [p.to_dict() for p in self.blueprint_permissions],
            'apps': [a.to_dict() for a in self.apps],
        }

    def __repr__(self):
        return f'<Student user={self.user_id} class={self.class_id}>'


class BlueprintPermission(db.Model):
    """What a student may do with the VMs of one blueprint."""
    __tablename__ = 'blueprint_permissions'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False, index=True)
    bp_id = db.Column(db.String(64), nullable=False)
    start_vms = db.Column(db.Boolean, default=False, nullable=False)
    stop_vms = db.Column(db.Boolean, default=False, nullable=False)
    console = db.Column(db.Boolean, default=False, nullable=False)

    student = db.relationship('Student', back_populates='blueprint_permissions')

    def flags(self) -> dict:
        return {
            'startVms': self.start_vms,
            'stopVms': self.stop_vms,
            'console': self.console,
        }

    def to_dict(self) -> dict:
        return {'bpId': self.bp_id, **self.flags()}


class StudentApp(db.Model):
    """Application owned by a student on the provisioning service."""
    __tablename__ = 'student_apps'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False, index=True)
    app_id = db.Column(db.String(64), nullable=False)  # Remote application id
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    student = db.relationship('Student', back_populates='apps')

    def to_dict(self) -> dict:
        return {'appId': self.app_id}


def init_db(app):
    """Initialize database with Flask app context.

    Call this in create_app() to set up the database.
    """
    from training_server.config import DATABASE_URL

    if 'SQLALCHEMY_DATABASE_URI' not in app.config:
        if DATABASE_URL:
            app.config['SQLALCHEMY_DATABASE_URI'] = DATABASE_URL
        else:
            db_path = os.path.join(os.path.dirname(__file__), 'training.db')
            app.config['SQLALCHEMY_DATABASE_URI'] = f'sqlite:///{db_path}'
            # gthread workers share the sqlite file across threads
            app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {
                'connect_args': {
                    'check_same_thread': False,
                    'timeout': 15,
                }
            }

    # Disable modification tracking (not needed and impacts performance)
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    db.init_app(app)

    with app.app_context():
        if db.engine.dialect.name == 'sqlite':
            # WAL reduces write-lock contention between request threads
            try:
                db.session.execute(text("PRAGMA journal_mode=WAL;"))
                db.session.execute(text("PRAGMA busy_timeout=15000;"))
                db.session.commit()
            except Exception:
                db.session.rollback()
        db.create_all()
