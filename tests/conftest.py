from datetime import datetime

import pytest

from config import ConfigurationManager
from cms_converter.schema import SchemaBuilder


CLAIM_FORM_TEXT = """HEALTH INSURANCE CLAIM FORM
APPROVED BY NATIONAL UNIFORM CLAIM COMMITTEE (NUCC) 02/12
1a. INSURED'S I.D. NUMBER (For Program in Item 1) XYZ123456789
2. PATIENT'S NAME (Last Name, First Name, Middle Initial) DOE, JANE A
3. PATIENT'S BIRTH DATE MM DD YY 04 15 1980 SEX FEMALE
4. INSURED'S NAME (Last Name, First Name, Middle Initial) DOE, JOHN B
5. PATIENT'S ADDRESS (No., Street) 123 MAIN ST
TELEPHONE (Include Area Code) (555) 123-4567
11a. INSURED'S DATE OF BIRTH MM DD YY 01 02 1978
11c. INSURANCE PLAN NAME OR PROGRAM NAME BLUE CROSS PPO
24. A. DATE(S) OF SERVICE From MM DD YY 03 10 2024
D. PROCEDURES, SERVICES, OR SUPPLIES (CPT/HCPCS) 99214
26. PATIENT'S ACCOUNT NO. ACC-7788
31. SIGNATURE OF PHYSICIAN OR SUPPLIER INCLUDING DEGREES OR CREDENTIALS
DR. ALAN SMITH
"""

FIXED_NOW = datetime(2024, 6, 1, 9, 30)


@pytest.fixture(autouse=True)
def fresh_config():
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture
def claim_text():
    return CLAIM_FORM_TEXT


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def small_schema():
    return (
        SchemaBuilder("test")
        .segment("MSH")
        .field(1, "sendingApp")
        .segment("PID")
        .field(1, "setId")
        .field(2, "patientId")
        .field(3, "patientName")
        .field(5, "dob", "date")
        .segment("OBX", repeating=True, set_id_field="setId")
        .field(1, "setId")
        .field(2, "value")
        .build()
    )
