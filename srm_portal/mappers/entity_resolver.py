from srm_portal.schemas.rates import RateTierSet
from srm_portal.schemas.srm import (
    CustomerDetails,
    CustomerRecord,
    Resolution,
    ResolutionMode,
    VehicleDetails,
    VehicleRecord,
)

# Copied from a selected record; emptied again when the user switches to a new entity
CUSTOMER_AUTOFILL_FIELDS = (
    "nationality",
    "passport_number",
    "driving_license_number",
    "phone_number",
    "country_code",
    "email",
    "customer_profile_pic",
)


def resolve(selection: CustomerRecord | VehicleRecord | None, typed_value: str) -> Resolution:
    """Decide whether a step attaches an existing record or creates one.

    selection(id="c1"), "Jane" -> existing c1
    None, "Jane"              -> new
    None, ""                  -> blank (submission must be blocked)
    """
    if selection is not None and selection.id.strip():
        return Resolution(mode=ResolutionMode.existing, entity_id=selection.id)
    if typed_value.strip():
        return Resolution(mode=ResolutionMode.new)
    return Resolution(mode=ResolutionMode.blank)


def apply_customer_selection(
    draft: CustomerDetails,
    selection: CustomerRecord | None,
    typed_value: str,
) -> tuple[Resolution, CustomerDetails]:
    resolution = resolve(selection, typed_value)

    if resolution.mode == ResolutionMode.existing:
        updated = draft.model_copy(update={
            "customer_name": selection.customer_name,
            **{
                field: getattr(selection, field) or ""
                for field in CUSTOMER_AUTOFILL_FIELDS
            },
        })
        return resolution, updated

    updated = draft.model_copy(update={
        "customer_name": typed_value.strip(),
        **{field: "" for field in CUSTOMER_AUTOFILL_FIELDS},
    })
    return resolution, updated


def apply_vehicle_selection(
    draft: VehicleDetails,
    selection: VehicleRecord | None,
    typed_value: str,
) -> tuple[Resolution, VehicleDetails]:
    resolution = resolve(selection, typed_value)

    if resolution.mode == ResolutionMode.existing:
        updated = draft.model_copy(update={
            "vehicle_registration_number": selection.vehicle_registration_number,
            "vehicle_category_id": selection.vehicle_category_id or "",
            "vehicle_brand_id": selection.vehicle_brand_id or "",
            "vehicle_photo": selection.vehicle_photo or "",
            "rental_details": selection.rental_details.model_copy(deep=True),
        })
        return resolution, updated

    updated = draft.model_copy(update={
        "vehicle_registration_number": typed_value.strip(),
        "vehicle_category_id": "",
        "vehicle_brand_id": "",
        "vehicle_photo": "",
        "rental_details": RateTierSet(),
    })
    return resolution, updated
