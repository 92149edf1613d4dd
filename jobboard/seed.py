"""Reset the database to the demo dataset: ``python -m jobboard.seed``."""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from . import models
from .database import Base, SessionLocal, engine
from .status import ApplicationStatus, RoleStatus

logger = logging.getLogger(__name__)


def clear(db: Session) -> None:
    # Children first so foreign keys never dangle.
    db.query(models.Message).delete()
    db.query(models.Application).delete()
    db.query(models.Role).delete()
    db.execute(models.hiring_manager_companies.delete())
    db.query(models.HiringManager).delete()
    db.query(models.Candidate).delete()
    db.query(models.Company).delete()
    db.flush()


def seed(db: Session) -> None:
    clear(db)

    acme = models.Company(
        name="Acme AI",
        description="Building the next generation of AI-powered developer tools. Series A backed.",
        industry="AI / Machine Learning",
        location="San Francisco, CA",
        website="https://acmeai.dev",
    )
    cloudsync = models.Company(
        name="CloudSync",
        description="Enterprise cloud infrastructure platform helping teams deploy and scale applications.",
        industry="Cloud Infrastructure",
        location="New York, NY",
        website="https://cloudsync.io",
    )
    healthstack = models.Company(
        name="HealthStack",
        description="Digital health platform connecting patients with providers through telehealth.",
        industry="Healthcare Technology",
        location="Austin, TX",
        website="https://healthstack.io",
    )

    sarah = models.HiringManager(
        name="Sarah Chen", email="sarah@acmeai.dev", title="VP of Engineering",
        is_persona=True, companies=[acme, cloudsync],
    )
    marcus = models.HiringManager(
        name="Marcus Rivera", email="marcus@cloudsync.io", title="Head of Product",
        is_persona=True, companies=[cloudsync],
    )
    priya = models.HiringManager(
        name="Priya Patel", email="priya@healthstack.io", title="Engineering Manager",
        is_persona=True, companies=[healthstack],
    )

    alex = models.Candidate(
        name="Alex Johnson",
        email="alex.johnson@mailbox.org",
        linkedin_url="https://linkedin.com/in/alexjohnson",
        headline="Full-Stack Engineer, 3 Years Experience",
        years_experience=3,
        skills="React, TypeScript, Node.js, PostgreSQL, AWS",
        bio="Passionate about building products that make developers more productive.",
        is_persona=True,
    )
    jordan = models.Candidate(
        name="Jordan Lee",
        email="jordan.lee@mailbox.org",
        linkedin_url="https://linkedin.com/in/jordanlee",
        headline="New Grad, CS @ Stanford",
        years_experience=0,
        skills="Python, Java, React, Machine Learning, SQL",
        bio="Recent CS graduate interested in AI/ML engineering roles.",
        is_persona=True,
    )
    sam = models.Candidate(
        name="Sam Taylor",
        email="sam.taylor@mailbox.org",
        headline="Senior Product Designer",
        years_experience=7,
        skills="Figma, User Research, Design Systems, Prototyping",
        bio="Designer who codes. Led design systems at two scale-ups.",
        is_persona=True,
    )

    def role(company, manager, title, status, **fields):
        values = dict(
            location="San Francisco, CA",
            location_type="hybrid",
            employment_type="full-time",
            experience_level="mid",
            salary_currency="USD",
        )
        values.update(fields)
        deleted_at = datetime.now(timezone.utc) if status == RoleStatus.CLOSED else None
        return models.Role(
            title=title, status=status.value, deleted_at=deleted_at,
            company=company, hiring_manager=manager, **values,
        )

    ml_engineer = role(
        acme, sarah, "Machine Learning Engineer", RoleStatus.PUBLISHED,
        description="Train and ship the models behind our code assistant.",
        salary_min=160000, salary_max=210000, experience_level="senior",
    )
    frontend = role(
        acme, sarah, "Frontend Engineer", RoleStatus.PUBLISHED,
        description="Own the editor experience end to end in React and TypeScript.",
        salary_min=130000, salary_max=170000, location_type="remote", location="Remote",
    )
    role(
        acme, sarah, "Developer Advocate", RoleStatus.DRAFT,
        description="Teach developers how to get the most out of our tools.",
        salary_min=120000, salary_max=150000,
    )
    platform = role(
        cloudsync, marcus, "Platform Engineer", RoleStatus.PUBLISHED,
        description="Build the control plane that schedules customer workloads.",
        salary_min=150000, salary_max=190000, location="New York, NY", location_type="onsite",
    )
    role(
        cloudsync, marcus, "Product Designer", RoleStatus.CLOSED,
        description="Design the console used by thousands of operators every day.",
        salary_min=110000, salary_max=140000, location="New York, NY",
    )
    role(
        healthstack, priya, "Backend Engineer Intern", RoleStatus.PUBLISHED,
        description="Work with the care-delivery team on our scheduling APIs.",
        salary_min=40000, salary_max=55000, location="Austin, TX",
        employment_type="internship", experience_level="entry",
    )

    interview = models.Application(
        role=ml_engineer, candidate=alex, status=ApplicationStatus.INTERVIEW.value,
        cover_note="Excited about developer tooling and ML.",
    )
    models.Application(role=frontend, candidate=jordan, status=ApplicationStatus.NEW.value)
    models.Application(role=platform, candidate=alex, status=ApplicationStatus.REVIEWING.value)
    models.Application(
        role=frontend, candidate=sam, status=ApplicationStatus.ACCEPTED.value,
        cover_note="I would love to bring design systems experience to the editor.",
    )

    db.add_all([acme, cloudsync, healthstack, sarah, marcus, priya, alex, jordan, sam])
    db.flush()

    db.add_all([
        models.Message(
            application=interview, hiring_manager=sarah,
            content="Hi Alex, thanks for applying! Are you free for a call this week?",
        ),
        models.Message(
            application=interview, candidate=alex,
            content="Hi Sarah, yes! Thursday afternoon works well for me.",
        ),
    ])
    db.commit()
    logger.info("Seeded demo data")


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
