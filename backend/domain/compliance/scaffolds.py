"""
Default chapter and checklist structures for new certification packs.

CE follows the essential requirements of the Recreational Craft Directive
(RCD 2013/53/EU). ES-TRIN and Lloyds carry a simplified chapter layout and
no default checklist.
"""

from typing import Dict, List, NamedTuple, Tuple

from domain.shared.value_objects import CertificationType, ChecklistItemType

DOC = ChecklistItemType.DOC
INSPECTION = ChecklistItemType.INSPECTION
CALC = ChecklistItemType.CALC
CONFIRM = ChecklistItemType.CONFIRM


class ChapterTemplate(NamedTuple):
    chapter_number: str
    title: str
    description: str


class ChecklistTemplate(NamedTuple):
    title: str
    type: ChecklistItemType
    mandatory: bool


CE_CHAPTERS: Tuple[ChapterTemplate, ...] = (
    ChapterTemplate("1", "General Description",
                    "Overall description of the watercraft including principal dimensions, intended use, and design category."),
    ChapterTemplate("2", "Stability and Buoyancy",
                    "Stability calculations, buoyancy requirements, and flotation tests."),
    ChapterTemplate("3", "Structural Requirements",
                    "Hull and deck construction, structural calculations, and material specifications."),
    ChapterTemplate("4", "Handling Characteristics",
                    "Manoeuvrability, steering, and handling under various conditions."),
    ChapterTemplate("5", "Cockpit and Hull Openings",
                    "Cockpit drainage, hatch and portlight requirements, watertight integrity."),
    ChapterTemplate("6", "Maximum Load",
                    "Maximum load calculations, load capacity plate requirements."),
    ChapterTemplate("7", "Propulsion Installation",
                    "Engine installation, fuel system, exhaust system, and propulsion components."),
    ChapterTemplate("8", "Electrical System",
                    "Electrical installation, battery systems, protection devices, and wiring."),
    ChapterTemplate("9", "Steering System",
                    "Steering mechanism, emergency steering provisions."),
    ChapterTemplate("10", "Gas System",
                    "LPG installation, gas detection, ventilation requirements (if applicable)."),
    ChapterTemplate("11", "Fire Protection",
                    "Fire-fighting equipment, fire prevention measures, material fire ratings."),
    ChapterTemplate("12", "Navigation Lights",
                    "Navigation light installation and compliance with COLREGS."),
    ChapterTemplate("13", "Discharge Prevention",
                    "Waste water systems, holding tanks, discharge prevention measures."),
    ChapterTemplate("14", "Builders Plate and HIN",
                    "Hull Identification Number (HIN), builders plate specifications."),
    ChapterTemplate("15", "Owner's Manual and DoC",
                    "Owner's manual requirements and Declaration of Conformity."),
)

ES_TRIN_CHAPTERS: Tuple[ChapterTemplate, ...] = (
    ChapterTemplate("1", "Shipbuilding", "Hull construction, stability, freeboard requirements."),
    ChapterTemplate("2", "Machinery", "Engine room, propulsion, auxiliary machinery."),
    ChapterTemplate("3", "Electrical Installations", "Electrical systems, power supply, emergency power."),
    ChapterTemplate("4", "Safety Equipment", "Life-saving appliances, fire protection, signaling."),
    ChapterTemplate("5", "Accommodation", "Living quarters, sanitary facilities, ventilation."),
)

LLOYDS_CHAPTERS: Tuple[ChapterTemplate, ...] = (
    ChapterTemplate("1", "Classification and Survey", "Classification requirements, survey schedule."),
    ChapterTemplate("2", "Hull Structure", "Hull construction materials, scantlings, structural integrity."),
    ChapterTemplate("3", "Machinery and Systems", "Main and auxiliary machinery, systems installation."),
    ChapterTemplate("4", "Electrical Systems", "Electrical installations, emergency power."),
    ChapterTemplate("5", "Fire and Safety", "Fire protection, life-saving appliances."),
)

CHAPTER_SCAFFOLDS: Dict[CertificationType, Tuple[ChapterTemplate, ...]] = {
    CertificationType.CE: CE_CHAPTERS,
    CertificationType.ES_TRIN: ES_TRIN_CHAPTERS,
    CertificationType.LLOYDS: LLOYDS_CHAPTERS,
    CertificationType.OTHER: (),
}


# Default CE checklist per chapter number
CE_CHECKLIST: Dict[str, Tuple[ChecklistTemplate, ...]] = {
    "1": (
        ChecklistTemplate("Boat identification (HIN, name, model)", DOC, True),
        ChecklistTemplate("Principal dimensions documented", DOC, True),
        ChecklistTemplate("Design category classification", DOC, True),
        ChecklistTemplate("Intended use description", DOC, True),
        ChecklistTemplate("General arrangement drawings", DOC, True),
    ),
    "2": (
        ChecklistTemplate("Stability calculations completed", CALC, True),
        ChecklistTemplate("Flotation test performed", INSPECTION, True),
        ChecklistTemplate("Buoyancy material specification", DOC, True),
        ChecklistTemplate("Swamp test (if applicable)", INSPECTION, False),
    ),
    "3": (
        ChecklistTemplate("Hull laminate specification", DOC, True),
        ChecklistTemplate("Structural calculations", CALC, True),
        ChecklistTemplate("Material certificates", DOC, True),
        ChecklistTemplate("Hull integrity inspection", INSPECTION, True),
    ),
    "4": (
        ChecklistTemplate("Handling test performed", INSPECTION, True),
        ChecklistTemplate("Maneuverability assessment", INSPECTION, True),
        ChecklistTemplate("Speed trial results", DOC, False),
    ),
    "5": (
        ChecklistTemplate("Cockpit drainage adequacy", INSPECTION, True),
        ChecklistTemplate("Portlight/hatch specifications", DOC, True),
        ChecklistTemplate("Watertight integrity test", INSPECTION, True),
    ),
    "6": (
        ChecklistTemplate("Load capacity calculation", CALC, True),
        ChecklistTemplate("Maximum persons calculation", CALC, True),
        ChecklistTemplate("Builders plate data verified", CONFIRM, True),
    ),
    "7": (
        ChecklistTemplate("Engine installation drawings", DOC, True),
        ChecklistTemplate("Fuel system compliance", INSPECTION, True),
        ChecklistTemplate("Exhaust system inspection", INSPECTION, True),
        ChecklistTemplate("Propulsion system test", INSPECTION, True),
        ChecklistTemplate("Engine CE certificate", DOC, True),
    ),
    "8": (
        ChecklistTemplate("Electrical diagram", DOC, True),
        ChecklistTemplate("Battery installation check", INSPECTION, True),
        ChecklistTemplate("Circuit protection verification", INSPECTION, True),
        ChecklistTemplate("Bonding/grounding inspection", INSPECTION, True),
        ChecklistTemplate("Electrical isolation test", INSPECTION, True),
    ),
    "9": (
        ChecklistTemplate("Steering system drawings", DOC, True),
        ChecklistTemplate("Steering mechanism inspection", INSPECTION, True),
        ChecklistTemplate("Emergency steering provisions", CONFIRM, True),
    ),
    "10": (
        ChecklistTemplate("Gas system drawings (if installed)", DOC, False),
        ChecklistTemplate("LPG installation inspection", INSPECTION, False),
        ChecklistTemplate("Gas detection system test", INSPECTION, False),
        ChecklistTemplate("Ventilation adequacy check", INSPECTION, False),
    ),
    "11": (
        ChecklistTemplate("Fire extinguisher installation", INSPECTION, True),
        ChecklistTemplate("Fire prevention measures", CONFIRM, True),
        ChecklistTemplate("Material fire ratings documented", DOC, True),
    ),
    "12": (
        ChecklistTemplate("Navigation lights installed", INSPECTION, True),
        ChecklistTemplate("Light positions per COLREGS", CONFIRM, True),
        ChecklistTemplate("Light type certificates", DOC, True),
    ),
    "13": (
        ChecklistTemplate("Holding tank installation", INSPECTION, True),
        ChecklistTemplate("Discharge prevention measures", CONFIRM, True),
        ChecklistTemplate("Y-valve sealing (if applicable)", INSPECTION, False),
    ),
    "14": (
        ChecklistTemplate("HIN format verification", INSPECTION, True),
        ChecklistTemplate("HIN location compliant", INSPECTION, True),
        ChecklistTemplate("Builders plate data correct", CONFIRM, True),
        ChecklistTemplate("Builders plate permanently affixed", INSPECTION, True),
    ),
    "15": (
        ChecklistTemplate("Owner's manual complete", DOC, True),
        ChecklistTemplate("Safety instructions included", DOC, True),
        ChecklistTemplate("Maintenance schedule included", DOC, True),
        ChecklistTemplate("Declaration of Conformity prepared", DOC, True),
        ChecklistTemplate("Technical file complete", CONFIRM, True),
    ),
}


def get_chapter_scaffold(certification_type: CertificationType) -> List[ChapterTemplate]:
    return list(CHAPTER_SCAFFOLDS.get(certification_type, ()))


def get_chapter_checklist(certification_type: CertificationType, chapter_number: str) -> List[ChecklistTemplate]:
    if certification_type != CertificationType.CE:
        return []
    return list(CE_CHECKLIST.get(chapter_number, ()))
