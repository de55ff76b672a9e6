# Services package - re-exports for convenient imports
# noqa: F401 comments indicate these are intentional re-exports
from training_server.services.class_service import (
    ClassNotFoundError as ClassNotFoundError,  # noqa: F401
    ClassRepository as ClassRepository,  # noqa: F401
)
from training_server.services.course_service import (
    CourseRepository as CourseRepository,  # noqa: F401
)
from training_server.services.provisioning_client import (
    ProvisioningClient as ProvisioningClient,  # noqa: F401
    ProvisioningError as ProvisioningError,  # noqa: F401
)
from training_server.services.student_service import (
    ErrorKind as ErrorKind,  # noqa: F401
    StudentRequestError as StudentRequestError,  # noqa: F401
    StudentService as StudentService,  # noqa: F401
)
