# schemas.py
# Required strings must be non-empty after stripping; Description,
# PrescriptionRequired and user_status only have to be present.
from datetime import date
from typing import Annotated, Optional

from pydantic import BaseModel, Field, StringConstraints, model_validator

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
# Passwords are kept verbatim but may not be blank
Password = Annotated[str, StringConstraints(min_length=1, pattern=r"\S")]
PositiveId = Annotated[int, Field(gt=0)]
Money = Annotated[float, Field(ge=0)]


class PartialUpdate(BaseModel):
    """Base for update payloads: at least one known field must be supplied."""

    @model_validator(mode="after")
    def require_some_field(self):
        if not self.changes():
            raise ValueError("No fields to update")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


# -------------------------------------------------------------------
# Users
# -------------------------------------------------------------------

class UserCreate(BaseModel):
    user_id: NonEmptyStr = Field(..., examples=["pharm01"])
    user_pass: Password = Field(..., examples=["strongpassword123"])
    user_department: NonEmptyStr = Field(..., examples=["Dispensary"])
    user_type: NonEmptyStr = Field(..., examples=["pharmacist"])
    user_status: int = Field(..., ge=0, le=1)


class UserLogin(BaseModel):
    user_id: NonEmptyStr
    user_pass: Password


# -------------------------------------------------------------------
# Products
# -------------------------------------------------------------------

class ProductCreate(BaseModel):
    ProductName: NonEmptyStr = Field(..., examples=["Panadol"])
    GenericName: NonEmptyStr = Field(..., examples=["Paracetamol"])
    Strength: NonEmptyStr = Field(..., examples=["500 mg"])
    PharmaceuticalForm: NonEmptyStr = Field(..., examples=["Tablet"])
    RouteOfAdministration: NonEmptyStr = Field(..., examples=["Oral"])
    ManufacturerID: PositiveId
    ATC_Code: NonEmptyStr = Field(..., examples=["N02BE01"])
    Description: str
    PrescriptionRequired: bool
    DrugIdentificationNumber: NonEmptyStr


class ProductUpdate(PartialUpdate):
    ProductName: Optional[NonEmptyStr] = None
    GenericName: Optional[NonEmptyStr] = None
    Strength: Optional[NonEmptyStr] = None
    PharmaceuticalForm: Optional[NonEmptyStr] = None
    RouteOfAdministration: Optional[NonEmptyStr] = None
    ManufacturerID: Optional[PositiveId] = None
    ATC_Code: Optional[NonEmptyStr] = None
    Description: Optional[str] = None
    PrescriptionRequired: Optional[bool] = None
    DrugIdentificationNumber: Optional[NonEmptyStr] = None


# -------------------------------------------------------------------
# Inventory
# -------------------------------------------------------------------

class InventoryCreate(BaseModel):
    ProductID: PositiveId
    BatchNumber: NonEmptyStr = Field(..., examples=["B1234"])
    ExpiryDate: date = Field(..., examples=["2027-12-31"])
    QuantityInStock: int = Field(..., ge=0)
    Location: Optional[str] = None
    CostPrice: Money
    SellingPrice: Money


class InventoryUpdate(PartialUpdate):
    ProductID: Optional[PositiveId] = None
    BatchNumber: Optional[NonEmptyStr] = None
    ExpiryDate: Optional[date] = None
    QuantityInStock: Optional[int] = Field(None, ge=0)
    Location: Optional[str] = None
    CostPrice: Optional[Money] = None
    SellingPrice: Optional[Money] = None


# -------------------------------------------------------------------
# Sales and lookups
# -------------------------------------------------------------------

class SaleCreate(BaseModel):
    SaleDate: date = Field(default_factory=date.today)
    CustomerID: Optional[PositiveId] = None
    TotalAmount: Money


class ManufacturerCreate(BaseModel):
    ManufacturerName: NonEmptyStr


class CustomerCreate(BaseModel):
    CustomerName: NonEmptyStr
