#!/usr/bin/env python3
"""
Database Seeder for CommunityCircle

Populates the database with a small Philadelphia demo community.

Usage:
    # From project root with venv activated:
    python scripts/seed_database.py

    # Wipe existing rows first:
    python scripts/seed_database.py --clear

Features:
    - Creates an admin, five hosts and a handful of parents, all with profiles
    - Creates past and upcoming events around Center City
    - Creates RSVPs, check-ins, feedback, a thread with messages and a report

Every account shares the password given by --password.
"""
import argparse
import os
import random
import sys
from datetime import datetime, timedelta, timezone

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Configuration
DEFAULT_PASSWORD = "password123!"
DEFAULT_RSVPS_PER_EVENT = 3
DEFAULT_CITY = "Philadelphia"

ALL_INTERESTS = ["walks", "playground", "library", "crafts", "sports", "nature", "music", "cooking"]
ALL_AGE_RANGES = ["0-2", "3-5", "6-8", "9-12"]

HOSTS = [
    {"email": "host1@communitycircle.local", "name": "Sarah Mitchell", "lat": 39.9490, "lng": -75.1710,
     "radius": 5, "interests": ["walks", "playground", "nature", "music"], "ages": ["0-2", "3-5"], "phone": True},
    {"email": "host2@communitycircle.local", "name": "James Rodriguez", "lat": 39.9560, "lng": -75.1590,
     "radius": 8, "interests": ["sports", "playground", "cooking", "nature"], "ages": ["3-5", "6-8"], "phone": True},
    {"email": "host3@communitycircle.local", "name": "Emily Chen", "lat": 39.9545, "lng": -75.1680,
     "radius": 3, "interests": ["library", "crafts", "music", "walks"], "ages": ["0-2", "3-5", "6-8"], "phone": True},
    {"email": "host4@communitycircle.local", "name": "Marcus Johnson", "lat": 39.9470, "lng": -75.1625,
     "radius": 6, "interests": ["sports", "nature", "playground", "cooking"], "ages": ["6-8", "9-12"], "phone": False},
    {"email": "host5@communitycircle.local", "name": "Priya Patel", "lat": 39.9580, "lng": -75.1700,
     "radius": 4, "interests": ["crafts", "library", "music", "walks"], "ages": ["0-2", "3-5"], "phone": False},
]

PARENTS = [
    {"email": "user1@communitycircle.local", "name": "Olivia Barnes", "lat": 39.9510, "lng": -75.1640,
     "radius": 5, "interests": ["walks", "playground", "music"], "ages": ["0-2", "3-5"]},
    {"email": "user2@communitycircle.local", "name": "David Kim", "lat": 39.9535, "lng": -75.1695,
     "radius": 7, "interests": ["sports", "nature", "cooking"], "ages": ["6-8", "9-12"]},
    {"email": "user3@communitycircle.local", "name": "Amara Okafor", "lat": 39.9550, "lng": -75.1615,
     "radius": 4, "interests": ["crafts", "library", "playground"], "ages": ["3-5", "6-8"]},
]

# (host index, days from now, hour, minute, event fields)
EVENTS = [
    (0, -5, 9, 30, {
        "title": "Morning Stroller Walk at Rittenhouse",
        "description": "A relaxed morning walk around Rittenhouse Square for parents with strollers. "
                       "We loop the park twice at a gentle pace with a snack break at the fountain.",
        "category": "WALK", "duration_mins": 60, "setting": "OUTDOOR", "age_min": 0, "age_max": 3,
        "max_attendees": 12, "screen_light": False, "location_label_public": "Rittenhouse Square",
        "location_notes_private": "Goat statue on the south side, near 18th and Walnut.",
        "latitude": 39.9496, "longitude": -75.1718,
    }),
    (2, -7, 10, 30, {
        "title": "Toddler Story Time at Free Library",
        "description": "Three picture books followed by a simple craft related to the stories. "
                       "Ideal for toddlers and preschoolers.",
        "category": "LIBRARY", "duration_mins": 45, "setting": "INDOOR", "age_min": 1, "age_max": 4,
        "max_attendees": 10, "screen_light": True,
        "location_label_public": "Free Library of Philadelphia - Main Branch",
        "location_notes_private": "Children's section, 1st floor, reading nook in the back left corner.",
        "latitude": 39.9607, "longitude": -75.1709,
    }),
    (0, 1, 17, 0, {
        "title": "Sunset Stroll along Schuylkill River Trail",
        "description": "An evening walk along the river trail at a kid-friendly pace with stops to "
                       "watch the rowers. Bring a light jacket.",
        "category": "WALK", "duration_mins": 75, "setting": "OUTDOOR", "age_min": 0, "age_max": 8,
        "max_attendees": 10, "screen_light": False,
        "location_label_public": "Schuylkill River Trail - South St Bridge",
        "location_notes_private": "Trail entrance under the South Street Bridge, west bank, by the mural.",
        "latitude": 39.9443, "longitude": -75.1836,
    }),
    (1, 2, 10, 0, {
        "title": "Playground Meetup at Smith Memorial",
        "description": "Open play at Smith Memorial Playground. The giant wooden slide is a must-try "
                       "and the play area is fully enclosed.",
        "category": "PLAYGROUND", "duration_mins": 120, "setting": "OUTDOOR", "age_min": 2, "age_max": 10,
        "max_attendees": 20, "screen_light": True,
        "location_label_public": "Smith Memorial Playground, Fairmount Park",
        "location_notes_private": "Main gate on N 33rd St, near the big slide.",
        "latitude": 39.9810, "longitude": -75.1899,
    }),
    (2, 3, 14, 0, {
        "title": "Craft Swap & Play Date",
        "description": "Bring craft supplies you no longer need and swap with other families. "
                       "Glue, scissors and paper provided.",
        "category": "CRAFTS", "duration_mins": 90, "setting": "INDOOR", "age_min": 3, "age_max": 9,
        "max_attendees": 15, "screen_light": False,
        "location_label_public": "Spruce Hill Community Center",
        "location_notes_private": "Large community room on the 2nd floor.",
        "latitude": 39.9512, "longitude": -75.2118,
    }),
    (3, 4, 9, 0, {
        "title": "Flag Football at FDR Park",
        "description": "Non-contact flag football for kids who love to run. All skill levels welcome. "
                       "Flags and a soft football supplied.",
        "category": "SPORTS", "duration_mins": 90, "setting": "OUTDOOR", "age_min": 6, "age_max": 12,
        "max_attendees": 18, "screen_light": True, "location_label_public": "FDR Park - Open Fields",
        "location_notes_private": "Pattison Ave lot, walk east to the field by the boathouse.",
        "latitude": 39.9050, "longitude": -75.1780,
    }),
    (4, 5, 11, 0, {
        "title": "Baby Rhyme & Rhythm Circle",
        "description": "Nursery rhymes, shakers and hand-clap songs for babies and toddlers. "
                       "No musical experience needed.",
        "category": "OTHER", "duration_mins": 40, "setting": "INDOOR", "age_min": 0, "age_max": 2,
        "max_attendees": 8, "screen_light": True,
        "location_label_public": "South Philadelphia Library Branch",
        "location_notes_private": "Basement activity room, side entrance on Broad Street.",
        "latitude": 39.9290, "longitude": -75.1651,
    }),
]

FEEDBACK_TAGS = ["friendly", "well-organized", "good-for-toddlers", "easy-parking", "would-return"]


def days_from_now(days: int, hour: int, minute: int) -> datetime:
    """Naive UTC timestamp at a local wall-clock time `days` away"""
    local = datetime.now().astimezone().replace(hour=hour, minute=minute, second=0, microsecond=0)
    local = local + timedelta(days=days)
    return local.astimezone(timezone.utc).replace(tzinfo=None)


def seed_database(
    password: str = DEFAULT_PASSWORD,
    rsvps_per_event: int = DEFAULT_RSVPS_PER_EVENT,
    clear_existing: bool = False
):
    """Main seeding function"""
    try:
        from community_circle.db.database import get_db_session, init_db
        from community_circle.db import models
        from community_circle.services.profile_service import compute_trust_score
        from community_circle.services.user_service import user_service
    except ImportError as e:
        print(f"Error importing database modules: {e}")
        print("Make sure you're running from the project root with dependencies installed.")
        sys.exit(1)

    print("=" * 60)
    print("CommunityCircle Database Seeder")
    print("=" * 60)
    print(f"Hosts: {len(HOSTS)}")
    print(f"Parents: {len(PARENTS)}")
    print(f"Events: {len(EVENTS)}")
    print()

    init_db()
    session_gen = get_db_session()
    db = next(session_gen)

    try:
        if clear_existing:
            print("Clearing existing data...")
            # Order matters due to foreign keys
            for model in (
                models.Feedback, models.Flag, models.Message, models.MessageThread,
                models.Report, models.Block, models.RSVP, models.HelpRequest,
                models.Event, models.Profile, models.User
            ):
                db.query(model).delete()
            db.commit()
            print("  Done clearing tables")

        password_hash = user_service.hash_password(password)
        now = datetime.utcnow()

        def create_member(entry, role, phone_verified=False):
            user = models.User(
                email=entry["email"],
                password_hash=password_hash,
                name=entry["name"],
                role=role
            )
            db.add(user)
            db.flush()
            profile = models.Profile(
                user_id=user.id,
                city=DEFAULT_CITY,
                latitude=entry["lat"],
                longitude=entry["lng"],
                radius_miles=entry["radius"],
                interests=entry["interests"],
                kids_age_ranges=entry["ages"],
                email_verified_at=now,
                phone_verified_at=now if phone_verified else None
            )
            profile.trust_score = compute_trust_score(
                profile.email_verified_at, profile.phone_verified_at, profile.id_verified_at
            )
            db.add(profile)
            return user

        # =====================================================================
        # 1. Users and profiles
        # =====================================================================
        print("\n1. Seeding users...")
        admin = create_member({
            "email": "admin@communitycircle.local", "name": "Admin User",
            "lat": 39.9526, "lng": -75.1652, "radius": 10,
            "interests": ALL_INTERESTS, "ages": ALL_AGE_RANGES
        }, models.Role.ADMIN.value)
        hosts = [create_member(h, models.Role.USER.value, h["phone"]) for h in HOSTS]
        parents = [create_member(p, models.Role.USER.value) for p in PARENTS]
        db.commit()
        print(f"  Created {1 + len(hosts) + len(parents)} users (1 admin, {len(hosts)} hosts, {len(parents)} parents)")

        # =====================================================================
        # 2. Events with their threads
        # =====================================================================
        print("\n2. Seeding events...")
        events = []
        for host_idx, days, hour, minute, fields in EVENTS:
            event = models.Event(
                host_user_id=hosts[host_idx].id,
                start_at=days_from_now(days, hour, minute),
                status=models.EventStatus.ACTIVE.value,
                **fields
            )
            db.add(event)
            db.flush()
            db.add(models.MessageThread(event_id=event.id))
            events.append(event)
        db.commit()
        print(f"  Created {len(events)} events")

        # =====================================================================
        # 3. RSVPs, check-ins and feedback on past events
        # =====================================================================
        print("\n3. Seeding RSVPs...")
        rsvp_count = 0
        feedback_count = 0
        for event in events:
            attendees = random.sample(parents, min(rsvps_per_event, len(parents), event.max_attendees))
            is_past = event.start_at + timedelta(minutes=event.duration_mins) < now
            for parent in attendees:
                db.add(models.RSVP(
                    event_id=event.id,
                    user_id=parent.id,
                    status=models.RSVPStatus.GOING.value,
                    checked_in_at=event.start_at if is_past else None
                ))
                rsvp_count += 1
                if is_past:
                    db.add(models.Feedback(
                        event_id=event.id,
                        user_id=parent.id,
                        rating=random.randint(3, 5),
                        tags=random.sample(FEEDBACK_TAGS, random.randint(1, 3))
                    ))
                    feedback_count += 1
        db.commit()
        print(f"  Created {rsvp_count} RSVPs, {feedback_count} feedback entries")

        # =====================================================================
        # 4. Thread messages and moderation data
        # =====================================================================
        print("\n4. Seeding messages and moderation queue...")
        upcoming = [event for event in events if event.start_at > now]
        thread = db.query(models.MessageThread).filter(
            models.MessageThread.event_id == upcoming[0].id
        ).first()
        db.add(models.Message(
            thread_id=thread.id,
            sender_user_id=upcoming[0].host_user_id,
            body="Looking forward to it! Bring water, it gets warm by the river."
        ))
        db.add(models.Report(
            reporter_user_id=parents[0].id,
            target_type=models.ReportTargetType.EVENT.value,
            target_id=upcoming[-1].id,
            reason=models.ReportReason.SPAM.value,
            notes="Same event posted twice this week",
            status=models.ReportStatus.OPEN.value
        ))
        db.commit()
        print("  Created 1 message, 1 open report")

        # =====================================================================
        # Done!
        # =====================================================================
        print("\n" + "=" * 60)
        print("Database seeding complete!")
        print("=" * 60)
        print(f"""
Summary:
  - admin id {admin.id} (admin@communitycircle.local)
  - {len(hosts)} hosts, {len(parents)} parents
  - {len(events)} events
  - {rsvp_count} RSVPs
  - {feedback_count} feedback entries
  - password for every account: {password}
        """)

    except Exception as e:
        db.rollback()
        print(f"\nError during seeding: {e}")
        raise
    finally:
        session_gen.close()


def main():
    parser = argparse.ArgumentParser(
        description="Seed CommunityCircle database with demo data"
    )
    parser.add_argument(
        "--password", "-p",
        default=DEFAULT_PASSWORD,
        help=f"Password for every seeded account (default: {DEFAULT_PASSWORD})"
    )
    parser.add_argument(
        "--rsvps", "-r",
        type=int,
        default=DEFAULT_RSVPS_PER_EVENT,
        help=f"GOING RSVPs per event (default: {DEFAULT_RSVPS_PER_EVENT})"
    )
    parser.add_argument(
        "--clear", "-c",
        action="store_true",
        help="Clear existing data before seeding"
    )

    args = parser.parse_args()

    seed_database(
        password=args.password,
        rsvps_per_event=args.rsvps,
        clear_existing=args.clear
    )


if __name__ == "__main__":
    main()
