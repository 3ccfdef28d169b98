# intake/forms.py
"""
Declarations of every submission kind the service accepts.

Adding a form is a data change here: list its columns (with the form field
name where the frontend uses a different one) and the registry takes care of
normalization, projection, table creation and routing.
"""
from enum import Enum

from intake.normalizer import DATE, DECIMAL, FILE, FILES, INTEGER, TIMESTAMP, FieldSpec as F
from intake.schema_registry import SchemaEntry, SchemaRegistry


class SubmissionKind(str, Enum):
    FREELANCE = "freelance"
    SELLING = "selling"
    COLLEGE = "college"
    SCHOOL = "school"
    OFFICE = "office"
    HOSPITAL = "hospital"
    FORM1 = "form1"
    FORM2 = "form2"
    FORM3 = "form3"
    FORM4 = "form4"
    FORM5 = "form5"
    FORM6 = "form6"
    CONTACT = "contact"
    COMPANY_PROJECT = "company-project"


def _intake_form(kind, table, org_field, alias, what_field="what", org_source=None):
    return SchemaEntry(
        kind=kind,
        table_name=table,
        aliases=(alias,),
        fields=(
            F(org_field, source=org_source, required=True),
            F("projectname", required=True),
            F("number"),
            F("email", required=True),
            F("preference"),
            F(what_field),
        ),
    )


ENTRIES = (
    SchemaEntry(
        kind=SubmissionKind.FREELANCE,
        table_name="freelance",
        aliases=("submit-freelance", "freelance-listing"),
        id_column="id",
        search_columns=("title", "domain_name", "project_detail"),
        natural_key="title",
        fields=(
            F("title", required=True),
            F("seller_name", source="sellerName", required=True),
            F("domain_name", source="domainName"),
            F("min_price", source="minPrice", type=DECIMAL),
            F("max_price", source="maxPrice", type=DECIMAL),
            F("zip_file", source="zipFile", type=FILE),
            F("images", type=FILES, max_files=10),
            F("project_detail", source="projectDetail"),
            F("created_at", type=TIMESTAMP),
        ),
    ),
    SchemaEntry(
        kind=SubmissionKind.SELLING,
        table_name="selling_projects",
        aliases=("selling-form",),
        id_column="id",
        search_columns=("project_name", "message"),
        natural_key="project_name",
        fields=(
            F("name", source="Name", required=True),
            F("project_name", source="projectname", required=True),
            F("mobile_number", source="mobileNumber"),
            F("email", source="gmail", required=True),
            F("min_price", source="minPrice", type=DECIMAL),
            F("max_price", source="maxPrice", type=DECIMAL),
            F("message"),
            F("zip_files", source="zipFiles", type=FILES, max_files=10),
            F("image_files", source="imageFiles", type=FILES, max_files=10),
            F("created_at", type=TIMESTAMP),
        ),
    ),
    _intake_form(SubmissionKind.COLLEGE, "college_projects", "collegename", "college-form"),
    _intake_form(SubmissionKind.SCHOOL, "school_projects", "schoolname", "school-form"),
    _intake_form(SubmissionKind.OFFICE, "office_projects", "officename", "office-form"),
    _intake_form(SubmissionKind.HOSPITAL, "hospital_projects", "hospital_name", "hospital-form",
                 what_field="whatshoulddo", org_source="hospitelname"),
    SchemaEntry(
        kind=SubmissionKind.FORM1,
        table_name="project",
        fields=(
            F("team_name", source="teamName", required=True),
            F("leader_name", source="leaderName", required=True),
            F("projects", source="project"),
            F("mobile_number", source="mobileNumber"),
            F("gmail", required=True),
            F("college"),
            F("project_title", source="projectTitle"),
            F("group_or_solo", source="groupOrSolo"),
            F("solution_statement", source="solutionStatement"),
            F("what_to_do", source="whatToDo"),
        ),
    ),
    SchemaEntry(
        kind=SubmissionKind.FORM2,
        table_name="paper_work",
        fields=(
            F("team_name", source="teamName", required=True),
            F("leader_name", source="leaderName", required=True),
            F("paper_name", source="paperName"),
            F("mobile_number", source="mobileNumber"),
            F("gmail", required=True),
            F("group_or_solo", source="groupOrSolo"),
            F("solution_statement", source="solutionStatement"),
            F("what_to_do", source="whatToDo"),
        ),
    ),
    SchemaEntry(
        kind=SubmissionKind.FORM3,
        table_name="hackathon",
        fields=(
            F("team_name", source="teamName", required=True),
            F("leader_name", source="leaderName", required=True),
            F("project_title", source="projectTitle"),
            F("hackathon_date", source="hackathondate", type=DATE),
            F("hackathon"),
            F("mobile_number", source="mobileNumber"),
            F("gmail", required=True),
            F("college"),
            F("group_or_solo", source="groupOrSolo"),
            F("solution_statement", source="solutionStatement"),
            F("what_to_do", source="whatToDo"),
        ),
    ),
    SchemaEntry(
        kind=SubmissionKind.FORM4,
        table_name="hardware_modification",
        fields=(
            F("name", source="Name", required=True),
            F("project_title", source="projectname"),
            F("mobile_number", source="mobileNumber"),
            F("gmail", required=True),
            F("preferences", source="preference"),
            F("solution_statement", source="solutionStatement"),
        ),
    ),
    SchemaEntry(
        kind=SubmissionKind.FORM5,
        table_name="software_modification",
        fields=(
            F("name", source="Name", required=True),
            F("project_title", source="projectname"),
            F("mobile_number", source="mobileNumber"),
            F("gmail", required=True),
            F("preferences", source="preference"),
            F("solution_statement", source="solutionStatement"),
        ),
    ),
    SchemaEntry(
        kind=SubmissionKind.FORM6,
        table_name="hardware_bases",
        fields=(
            F("name", source="Name", required=True),
            F("project_name", source="projectName"),
            F("gmail", required=True),
            F("mobile_number", source="mobileNumber"),
            F("choose"),
            F("components"),
            F("group_or_solo", source="groupOrSolo"),
            F("solution_statement", source="solutionStatement"),
            F("what_to_do", source="whatToDo"),
        ),
    ),
    SchemaEntry(
        kind=SubmissionKind.CONTACT,
        table_name="contact_submissions",
        fields=(
            F("name", required=True),
            F("email", required=True),
            F("subject"),
            F("message", required=True),
        ),
    ),
    SchemaEntry(
        kind=SubmissionKind.COMPANY_PROJECT,
        table_name="company_projects",
        aliases=("form",),
        fields=(
            F("company_name", source="companyName", required=True),
            F("mail_id", source="mailId", required=True),
            F("mobile_number", source="mobileNumber"),
            F("project_detail", source="projectDetail"),
            F("what_to_do", source="what"),
            F("select_value2", source="selectValue"),
            F("team_details", source="teamdetials"),
            F("how_many_member", source="howManyMember", type=INTEGER),
            F("start_date", source="startDate", type=DATE),
            F("end_date", source="endDate", type=DATE),
            F("meeting_arrangement", source="meetingArrangement"),
            F("preferences", source="preference"),
            F("what_time", source="whatTime"),
            F("message"),
            F("frontend"),
            F("backend"),
            F("fullstack"),
            F("machinelearning"),
            F("other"),
        ),
    ),
)

# built at import so a misconfigured entry stops the process before it serves
REGISTRY = SchemaRegistry(ENTRIES)
