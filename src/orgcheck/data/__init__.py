"""Concrete record classes. Importing this package registers every kind."""

from .code import (
    ApexClass,
    ApexTestMethodResult,
    ApexTrigger,
    CustomLabel,
    Document,
    Flow,
    FlowVersion,
    HomePageComponent,
    LightningAuraComponent,
    LightningPage,
    LightningWebComponent,
    VisualForceComponent,
    VisualForcePage,
    Workflow,
)
from .org import Organization, Package
from .schema import (
    Field,
    FieldSet,
    Limit,
    Object,
    ObjectType,
    PageLayout,
    RecordTypeInfo,
    ValidationRule,
    WebLink,
)
from .security import (
    AppPermission,
    Application,
    CollaborationGroup,
    FieldPermission,
    Group,
    ObjectPermission,
    PermissionSet,
    PermissionSetLicense,
    Profile,
    ProfileIpRangeRestriction,
    ProfileLoginHourRestriction,
    ProfilePasswordPolicy,
    ProfileRestrictions,
    User,
    UserRole,
)

__all__ = [
    "ApexClass",
    "ApexTestMethodResult",
    "ApexTrigger",
    "AppPermission",
    "Application",
    "CollaborationGroup",
    "CustomLabel",
    "Document",
    "Field",
    "FieldPermission",
    "FieldSet",
    "Flow",
    "FlowVersion",
    "Group",
    "HomePageComponent",
    "LightningAuraComponent",
    "LightningPage",
    "LightningWebComponent",
    "Limit",
    "Object",
    "ObjectPermission",
    "ObjectType",
    "Organization",
    "Package",
    "PageLayout",
    "PermissionSet",
    "PermissionSetLicense",
    "Profile",
    "ProfileIpRangeRestriction",
    "ProfileLoginHourRestriction",
    "ProfilePasswordPolicy",
    "ProfileRestrictions",
    "RecordTypeInfo",
    "User",
    "UserRole",
    "ValidationRule",
    "VisualForceComponent",
    "VisualForcePage",
    "WebLink",
    "Workflow",
]
