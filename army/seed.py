from dataclasses import dataclass


@dataclass(frozen=True)
class SeedRank:
    level: int
    name: str
    points_required: int
    points_from_previous: int


@dataclass(frozen=True)
class SeedSpecialPosition:
    name: str
    difficulty: str
    bonus_points_per_week: int
    description: str


DEFAULT_RANKS = (
    SeedRank(2, "Schütze", 0, 0),
    SeedRank(3, "Gefreiter", 100, 100),
    SeedRank(4, "Obergefreiter", 250, 150),
    SeedRank(5, "Hauptgefreiter", 400, 150),
    SeedRank(6, "Stabsgefreiter", 600, 200),
    SeedRank(7, "Unteroffizier", 850, 250),
    SeedRank(8, "Feldwebel", 1150, 300),
    SeedRank(9, "Oberfeldwebel", 1500, 350),
    SeedRank(10, "Hauptfeldwebel", 1900, 400),
    SeedRank(11, "Leutnant", 2350, 450),
    SeedRank(12, "Oberleutnant", 2850, 500),
    SeedRank(13, "Hauptmann", 3400, 550),
    SeedRank(14, "Major", 4000, 600),
    SeedRank(15, "Oberst", 4650, 650),
)

DEFAULT_SPECIAL_POSITIONS = (
    SeedSpecialPosition("Leitstellenausbilder", "easy", 5, "Leitstellenausbildung"),
    SeedSpecialPosition("Field Medic", "easy", 5, "Medizinische Versorgung"),
    SeedSpecialPosition("U1 Ausbilder", "medium", 10, "U1 Ausbildung"),
    SeedSpecialPosition("Aktenkunde Ausbilder", "medium", 10, "Aktenkunde Ausbildung"),
    SeedSpecialPosition("Personalabteilung", "hard", 15, "Personalverwaltung"),
    SeedSpecialPosition("Drill Sergeant", "hard", 15, "Grundausbildung"),
    SeedSpecialPosition("GWD Ausbilder", "hard", 15, "GWD Ausbildung"),
)
