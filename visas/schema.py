"""
Field schema of the visa application form.

Every persisted form field is declared once here with its shape
(kind + bounds), the form section it belongs to and its user-facing label.
The Validation Gateway builds its form from this table, the model mirrors
it, and the submission checks read the required list from it.

This module is deliberately free of Django imports: the client package
reuses it for local completeness checks.
"""
from collections import OrderedDict, namedtuple

# Field kinds
TEXT = 'text'
DATE = 'date'
BOOL = 'bool'
CHOICE = 'choice'
UUID = 'uuid'
STRING_LIST = 'string_list'
EMAIL = 'email'

GENDER_CHOICES = ('male', 'female', 'other')
VISA_TYPE_CHOICES = ('tourist', 'business', 'medical', 'conference', 'student', 'other')

# Form sections, in tab order
SECTIONS = OrderedDict([
    ('applicant', 'Applicant'),
    ('passport', 'Passport'),
    ('address', 'Address'),
    ('family', 'Family'),
    ('visa', 'Visa Details'),
    ('previous', 'Previous Visa'),
    ('references', 'References'),
    ('security', 'Security'),
    ('uploads', 'Documents'),
])

FieldSpec = namedtuple(
    'FieldSpec',
    ['name', 'kind', 'section', 'label', 'max_length', 'choices', 'required'],
)


def _field(name, kind, section, label, max_length=None, choices=None, required=False):
    return FieldSpec(name, kind, section, label, max_length, choices, required)


def text(name, max_length, section, label, required=False):
    return _field(name, TEXT, section, label, max_length=max_length, required=required)


def date(name, section, label, required=False):
    return _field(name, DATE, section, label, required=required)


def flag(name, section, label):
    return _field(name, BOOL, section, label)


FIELDS = (
    # --- Applicant Details ---
    text('surname', 50, 'applicant', 'Surname', required=True),
    text('given_name', 100, 'applicant', 'Given Name', required=True),
    text('full_name', 150, 'applicant', 'Full Name'),
    flag('changed_name', 'applicant', 'Changed Name'),
    text('changed_name_details', 200, 'applicant', 'Previous Name Details'),
    date('date_of_birth', 'applicant', 'Date of Birth', required=True),
    _field('gender', CHOICE, 'applicant', 'Gender',
           choices=GENDER_CHOICES, required=True),
    text('place_of_birth', 100, 'applicant', 'Place of Birth', required=True),
    text('country_of_birth', 100, 'applicant', 'Country of Birth', required=True),
    text('citizenship_id', 50, 'applicant', 'Citizenship/National ID'),
    text('religion', 50, 'applicant', 'Religion'),
    text('visible_identification_marks', 200, 'applicant', 'Visible Identification Marks'),
    text('educational_qualification', 50, 'applicant', 'Educational Qualification'),
    text('nationality', 100, 'applicant', 'Nationality', required=True),
    flag('nationality_by_birth', 'applicant', 'Nationality by Birth'),
    flag('lived_in_applying_country_2_years', 'applicant', 'Lived in Applying Country 2 Years'),

    # --- Passport Details ---
    text('passport_number', 20, 'passport', 'Passport Number', required=True),
    text('passport_place_of_issue', 100, 'passport', 'Passport Place of Issue', required=True),
    date('passport_issue_date', 'passport', 'Passport Issue Date', required=True),
    date('passport_expiry_date', 'passport', 'Passport Expiry Date', required=True),
    flag('other_passport_held', 'passport', 'Other Passport Held'),
    text('other_passport_country', 100, 'passport', 'Other Passport Country'),
    text('other_passport_number', 20, 'passport', 'Other Passport Number'),
    date('other_passport_issue_date', 'passport', 'Other Passport Issue Date'),
    text('other_passport_place_of_issue', 100, 'passport', 'Other Passport Place of Issue'),
    text('other_passport_nationality', 100, 'passport', 'Other Passport Nationality'),

    # --- Contact & Present Address ---
    _field('email', EMAIL, 'address', 'Email', max_length=255, required=True),
    text('mobile_isd', 10, 'address', 'Mobile ISD Code'),
    text('mobile_number', 15, 'address', 'Mobile Number', required=True),
    text('present_address_house_street', 200, 'address', 'House/Street Address', required=True),
    text('present_address_village_town', 100, 'address', 'Village/Town/City', required=True),
    text('present_address_state', 100, 'address', 'State/Province'),
    text('present_address_postal_code', 20, 'address', 'Postal Code'),
    text('present_address_country', 100, 'address', 'Country', required=True),
    text('present_address_phone', 20, 'address', 'Phone'),
    flag('permanent_address_same_as_present', 'address', 'Permanent Address Same as Present'),
    text('permanent_address_house_street', 200, 'address', 'Permanent House/Street Address'),
    text('permanent_address_village_town', 100, 'address', 'Permanent Village/Town/City'),
    text('permanent_address_state', 100, 'address', 'Permanent State/Province'),
    # Legacy address fields
    text('residential_address', 500, 'address', 'Residential Address'),
    text('city', 100, 'address', 'City'),
    text('country', 100, 'address', 'Country of Residence'),

    # --- Family Details ---
    text('father_name', 100, 'family', "Father's Name", required=True),
    text('father_nationality', 100, 'family', "Father's Nationality", required=True),
    text('father_prev_nationality', 100, 'family', "Father's Previous Nationality"),
    text('father_place_of_birth', 100, 'family', "Father's Place of Birth"),
    text('father_country_of_birth', 100, 'family', "Father's Country of Birth"),
    text('mother_name', 100, 'family', "Mother's Name", required=True),
    text('mother_nationality', 100, 'family', "Mother's Nationality", required=True),
    text('mother_prev_nationality', 100, 'family', "Mother's Previous Nationality"),
    text('mother_place_of_birth', 100, 'family', "Mother's Place of Birth"),
    text('mother_country_of_birth', 100, 'family', "Mother's Country of Birth"),
    text('marital_status', 20, 'family', 'Marital Status', required=True),
    text('spouse_name', 100, 'family', "Spouse's Name"),
    text('spouse_nationality', 100, 'family', "Spouse's Nationality"),
    text('spouse_prev_nationality', 100, 'family', "Spouse's Previous Nationality"),
    text('spouse_place_of_birth', 100, 'family', "Spouse's Place of Birth"),
    text('spouse_country_of_birth', 100, 'family', "Spouse's Country of Birth"),
    flag('pakistan_heritage', 'family', 'Pakistan Heritage'),
    text('pakistan_heritage_details', 500, 'family', 'Pakistan Heritage Details'),

    # --- Visa / Travel Details ---
    _field('visa_type', CHOICE, 'visa', 'Visa Type',
           choices=VISA_TYPE_CHOICES, required=True),
    text('visa_type_other', 100, 'visa', 'Other Visa Type'),
    text('duration_of_stay', 50, 'visa', 'Duration of Stay', required=True),
    date('intended_arrival_date', 'visa', 'Intended Arrival Date', required=True),
    _field('arrival_point_id', UUID, 'visa', 'Port of Arrival', required=True),
    text('expected_port_of_exit', 100, 'visa', 'Expected Port of Exit'),
    text('purpose_of_visit', 1000, 'visa', 'Purpose of Visit'),
    text('places_to_visit_1', 100, 'visa', 'Places to Visit (1)'),
    text('places_to_visit_2', 100, 'visa', 'Places to Visit (2)'),
    flag('hotel_booked_through_operator', 'visa', 'Hotel Booked Through Operator'),
    text('hotel_name', 200, 'visa', 'Hotel Name'),
    text('hotel_address', 500, 'visa', 'Hotel Address'),

    # --- Previous Visit / Visa History ---
    flag('visited_india_before', 'previous', 'Visited Before'),
    text('previous_india_address', 500, 'previous', 'Previous Address'),
    text('previous_india_cities', 200, 'previous', 'Cities Previously Visited'),
    text('previous_visa_number', 50, 'previous', 'Previous Visa Number'),
    text('previous_visa_type', 50, 'previous', 'Previous Visa Type'),
    text('previous_visa_place_of_issue', 100, 'previous', 'Previous Visa Place of Issue'),
    date('previous_visa_issue_date', 'previous', 'Previous Visa Issue Date'),
    flag('permission_refused_before', 'previous', 'Permission Refused Before'),
    text('permission_refused_details', 500, 'previous', 'Permission Refused Details'),
    # Legacy history/contact fields
    text('indian_contact_address', 500, 'previous', 'Contact Address'),
    text('indian_contact_person', 100, 'previous', 'Contact Person'),
    text('indian_contact_phone', 20, 'previous', 'Contact Phone'),
    text('previous_visa_details', 500, 'previous', 'Previous Visa Details'),
    flag('visa_refused_before', 'previous', 'Visa Refused Before'),
    text('visa_refusal_details', 500, 'previous', 'Visa Refusal Details'),
    _field('countries_visited_last_10_years', STRING_LIST, 'previous',
           'Countries Visited in Last 10 Years', max_length=100),
    flag('visited_saarc_countries', 'previous', 'Visited SAARC Countries'),
    text('saarc_countries_details', 500, 'previous', 'SAARC Countries Details'),

    # --- References ---
    text('reference_india_name', 100, 'references', 'Reference in India (Name)', required=True),
    text('reference_india_address', 500, 'references', 'Reference in India (Address)', required=True),
    text('reference_india_phone', 20, 'references', 'Reference in India (Phone)', required=True),
    text('reference_home_name', 100, 'references', 'Reference in Home Country (Name)', required=True),
    text('reference_home_address', 500, 'references', 'Reference in Home Country (Address)', required=True),
    text('reference_home_phone', 20, 'references', 'Reference in Home Country (Phone)', required=True),

    # --- Security Questions ---
    flag('security_arrested_convicted', 'security', 'Arrested or Convicted'),
    text('security_arrested_details', 500, 'security', 'Arrest Details'),
    flag('security_refused_entry_deported', 'security', 'Refused Entry or Deported'),
    text('security_refused_entry_details', 500, 'security', 'Refused Entry Details'),
    flag('security_criminal_activities', 'security', 'Criminal Activities'),
    text('security_criminal_details', 500, 'security', 'Criminal Activities Details'),
    flag('security_terrorist_activities', 'security', 'Terrorist Activities'),
    text('security_terrorist_details', 500, 'security', 'Terrorist Activities Details'),
    flag('security_terrorist_views', 'security', 'Terrorist Views'),
    text('security_terrorist_views_details', 500, 'security', 'Terrorist Views Details'),
    flag('security_asylum_sought', 'security', 'Asylum Sought'),
    text('security_asylum_details', 500, 'security', 'Asylum Details'),

    # --- Declaration ---
    flag('declaration_accepted', 'uploads', 'Accept declaration'),
)

FIELDS_BY_NAME = OrderedDict((spec.name, spec) for spec in FIELDS)

FIELD_NAMES = tuple(FIELDS_BY_NAME)

REQUIRED_FIELDS = tuple(spec for spec in FIELDS if spec.required)

# Documents that must exist before submission: (document_type, label)
REQUIRED_DOCUMENTS = (
    ('photo', 'Photo'),
    ('passport', 'Passport scan'),
)

# Field the client must have filled before the very first save creates a row
ANCHOR_FIELD = 'surname'


def is_blank(value):
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return str(value).strip() == ''


def missing_items(values, uploaded_document_types=None, check_documents=True):
    """
    Computes what still blocks a submission.

    Args:
        values (dict): field name -> current value.
        uploaded_document_types (iterable): document types already uploaded.
        check_documents (bool): the client may not know the documents yet.

    Returns:
        OrderedDict section title -> list of missing labels (empty when complete).
    """
    missing = OrderedDict()

    for spec in REQUIRED_FIELDS:
        if is_blank(values.get(spec.name)):
            missing.setdefault(SECTIONS[spec.section], []).append(spec.label)

    documents_title = SECTIONS['uploads']
    if check_documents:
        uploaded = set(uploaded_document_types or ())
        for doc_type, label in REQUIRED_DOCUMENTS:
            if doc_type not in uploaded:
                missing.setdefault(documents_title, []).append(label)

    if values.get('declaration_accepted') is not True:
        missing.setdefault(documents_title, []).append(
            FIELDS_BY_NAME['declaration_accepted'].label)

    return missing


def summarize_missing(missing):
    """
    Flattens missing items for display: at most two labels per section,
    then "(+N more)".
    """
    lines = []
    for section, labels in missing.items():
        line = f"{section}: {', '.join(labels[:2])}"
        if len(labels) > 2:
            line += f" (+{len(labels) - 2} more)"
        lines.append(line)
    return lines
