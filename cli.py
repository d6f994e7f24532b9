import argparse
import csv
import datetime
import json
import logging

from db import PersonalRecordRepository, ProfileRepository, SettingsRepository
from models import PersonalRecord, UserProfile
from strength_service import StrengthService
from algorithms.weight_converter import WeightConverter
from algorithms.strength_standards import get_exercise_category


def _profile_from_args(args: argparse.Namespace) -> UserProfile:
    return UserProfile(
        gender=args.gender,
        age=args.age,
        weight_value=args.bodyweight,
        weight_unit=args.bodyweight_unit if args.bodyweight else None,
        skeletal_muscle_mass_value=args.smm,
        skeletal_muscle_mass_unit=args.bodyweight_unit if args.smm else None,
    )


def _service(db_path: str, yaml_path: str) -> StrengthService:
    return StrengthService(
        PersonalRecordRepository(db_path),
        ProfileRepository(db_path),
        SettingsRepository(db_path, yaml_path),
    )


def read_records_csv(csv_path: str) -> list[PersonalRecord]:
    """Read records from a CSV with exercise, weight, unit and date columns."""
    records: list[PersonalRecord] = []
    with open(csv_path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for row in reader:
            name = row.get("exercise") or row.get("Exercise")
            weight = row.get("weight") or row.get("Weight")
            if not name or not weight:
                continue
            category = get_exercise_category(name)
            records.append(
                PersonalRecord(
                    exercise_name=name,
                    weight=float(weight),
                    weight_unit=(row.get("unit") or "kg").strip().lower(),
                    date=row.get("date") or datetime.date.today(),
                    **({"category": category} if category else {}),
                )
            )
    return records


def import_prs(csv_path: str, db_path: str) -> int:
    """Import personal records from a CSV file into the database."""
    repo = PersonalRecordRepository(db_path)
    return len(repo.bulk_add(read_records_csv(csv_path)))


def demo_data(db_path: str) -> None:
    """Populate the database with a demo profile and records if empty."""
    records = PersonalRecordRepository(db_path)
    if records.fetch_all_records():
        print("Database already contains personal records")
        return
    ProfileRepository(db_path).update(
        gender="Male", age=30, weight_value=80.0, weight_unit="kg"
    )
    today = datetime.date.today().isoformat()
    for name, weight in (
        ("Bench Press", 100.0),
        ("Seated Row", 70.0),
        ("Shoulder Press", 50.0),
        ("Lat Pulldown", 70.0),
        ("Leg Curl", 60.0),
        ("Leg Extension", 110.0),
    ):
        records.add(name, weight, "kg", today, get_exercise_category(name).value)
    print("Demo data inserted")


def main() -> None:
    parser = argparse.ArgumentParser(description="Strength utility commands")
    parser.add_argument("--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd", required=True)

    conv = sub.add_parser("convert")
    conv.add_argument("--weight", type=float, required=True)
    conv.add_argument("--unit", choices=["kg", "lbs"], required=True)

    def profile_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--gender", choices=["Male", "Female"])
        p.add_argument("--age", type=int)
        p.add_argument("--bodyweight", type=float)
        p.add_argument("--smm", type=float)
        p.add_argument("--bodyweight-unit", choices=["kg", "lbs"], default="kg")

    def store_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--db", default="strength.db")
        p.add_argument("--yaml", default="settings.yaml")

    cls = sub.add_parser("classify")
    cls.add_argument("--exercise", required=True)
    cls.add_argument("--weight", type=float, required=True)
    cls.add_argument("--unit", choices=["kg", "lbs"], default="kg")
    profile_args(cls)
    store_args(cls)

    thr = sub.add_parser("thresholds")
    thr.add_argument("--exercise", required=True)
    thr.add_argument("--unit", choices=["kg", "lbs"], default="kg")
    profile_args(thr)
    store_args(thr)

    imb = sub.add_parser("imbalances")
    store_args(imb)

    lvl = sub.add_parser("levels")
    store_args(lvl)

    imp = sub.add_parser("import_prs")
    imp.add_argument("--csv", required=True)
    imp.add_argument("--db", default="strength.db")

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default="strength.db")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.cmd == "convert":
        if args.unit == "kg":
            print(f"{args.weight} kg = {WeightConverter.kg_to_lb(args.weight)} lbs")
        else:
            print(f"{args.weight} lbs = {WeightConverter.lb_to_kg(args.weight)} kg")
    elif args.cmd == "classify":
        record = PersonalRecord(
            exercise_name=args.exercise, weight=args.weight, weight_unit=args.unit
        )
        classifier = _service(args.db, args.yaml).classifier()
        print(classifier.classify(record, _profile_from_args(args)).value)
    elif args.cmd == "thresholds":
        classifier = _service(args.db, args.yaml).classifier()
        result = classifier.get_strength_thresholds(
            args.exercise, _profile_from_args(args), args.unit
        )
        print(json.dumps(result.model_dump() if result else None))
    elif args.cmd == "imbalances":
        print(json.dumps(_service(args.db, args.yaml).balance(), indent=2))
    elif args.cmd == "levels":
        print(json.dumps(_service(args.db, args.yaml).levels(), indent=2))
    elif args.cmd == "import_prs":
        count = import_prs(args.csv, args.db)
        print(f"Imported {count} personal records")
    elif args.cmd == "demo":
        demo_data(args.db)


if __name__ == "__main__":
    main()
