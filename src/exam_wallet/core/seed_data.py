"""
seed_data.py: Sample exams and documents shown when the remote store cannot be reached.
"""

from datetime import date, datetime
from typing import List

from .models import Exam, UserDocument


def seed_exams() -> List[Exam]:
    """Return a fresh list of sample exams. No exam is marked as subscribed."""
    return [
        Exam(
            id="exam-1",
            name="JEE Main 2024",
            category="Engineering",
            registration_start_date=date(2023, 11, 1),
            registration_end_date=date(2023, 12, 15),
            exam_date=date(2024, 1, 24),
            result_date=date(2024, 2, 15),
            website_url="https://jeemain.nta.nic.in",
            description="Joint Entrance Examination for admission to undergraduate engineering programs across India.",
            eligibility="Candidates who have passed class 12th examination or equivalent.",
            application_fee="₹650 for General, ₹325 for SC/ST/PwD",
        ),
        Exam(
            id="exam-2",
            name="NEET 2024",
            category="Medical",
            registration_start_date=date(2023, 12, 1),
            registration_end_date=date(2024, 1, 15),
            exam_date=date(2024, 5, 5),
            result_date=date(2024, 6, 10),
            website_url="https://neet.nta.nic.in",
            description="National Eligibility cum Entrance Test for admission to MBBS and BDS courses in India.",
            eligibility="Candidates who have passed class 12th examination with Physics, Chemistry, and Biology.",
            application_fee="₹1500 for General, ₹800 for SC/ST/PwD",
        ),
        Exam(
            id="exam-3",
            name="UPSC Civil Services 2024",
            category="Civil Services",
            registration_start_date=date(2024, 2, 1),
            registration_end_date=date(2024, 3, 15),
            exam_date=date(2024, 6, 2),
            result_date=date(2024, 12, 15),
            website_url="https://upsc.gov.in",
            description="Civil Services Examination for recruitment to various Civil Services of the Government of India.",
            eligibility="Graduates in any discipline, age between 21-32 years (with relaxation for reserved categories).",
            application_fee="₹100 (exempted for SC/ST/PwD and women candidates)",
        ),
        Exam(
            id="exam-4",
            name="IBPS PO 2024",
            category="Banking",
            registration_start_date=date(2024, 1, 1),
            registration_end_date=date(2024, 2, 10),
            exam_date=date(2024, 3, 15),
            result_date=date(2024, 4, 30),
            website_url="https://ibps.in",
            description="Institute of Banking Personnel Selection Probationary Officer recruitment examination.",
            eligibility="Graduates in any discipline, age between 20-30 years.",
            application_fee="₹850 for General, ₹175 for SC/ST/PwD",
        ),
        Exam(
            id="exam-5",
            name="CBSE Class 12 Board Exam 2024",
            category="School Board",
            registration_start_date=date(2023, 10, 1),
            registration_end_date=date(2023, 11, 15),
            exam_date=date(2024, 3, 1),
            result_date=date(2024, 5, 15),
            website_url="https://cbse.gov.in",
            description="Central Board of Secondary Education Class 12 final examinations.",
            eligibility="Registered CBSE students who have completed Class 11.",
            application_fee="As per school registration",
        ),
        Exam(
            id="exam-6",
            name="CAT 2024",
            category="Management",
            registration_start_date=date(2024, 8, 1),
            registration_end_date=date(2024, 9, 15),
            exam_date=date(2024, 11, 24),
            result_date=date(2025, 1, 5),
            website_url="https://iimcat.ac.in",
            description="Common Admission Test for admission to postgraduate management programs at IIMs and other top business schools.",
            eligibility="Graduates in any discipline with minimum 50% marks (45% for reserved categories).",
            application_fee="₹2200 for General, ₹1100 for SC/ST/PwD",
        ),
    ]


def seed_documents() -> List[UserDocument]:
    return [
        UserDocument(id="doc-1", file_name="Class_10_Marksheet.pdf", file_type="pdf", file_size_kb=1240,
                     url="/placeholder.svg", created_at=datetime(2023, 5, 10), category="Certificates"),
        UserDocument(id="doc-2", file_name="Class_12_Marksheet.pdf", file_type="pdf", file_size_kb=1560,
                     url="/placeholder.svg", created_at=datetime(2023, 5, 11), category="Certificates"),
        UserDocument(id="doc-3", file_name="Passport_Photo.jpg", file_type="jpg", file_size_kb=780,
                     url="/placeholder.svg", created_at=datetime(2023, 6, 20), category="Identity"),
        UserDocument(id="doc-4", file_name="Aadhar_Card.pdf", file_type="pdf", file_size_kb=1020,
                     url="/placeholder.svg", created_at=datetime(2023, 6, 25), category="Identity"),
        UserDocument(id="doc-5", file_name="JEE_Admit_Card.pdf", file_type="pdf", file_size_kb=890,
                     url="/placeholder.svg", created_at=datetime(2024, 1, 10), category="Exam Documents"),
    ]
