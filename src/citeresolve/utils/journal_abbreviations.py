"""
Journal name and abbreviation lookup table.

Used only for journal-similarity comparison: a journal string can be expanded to
its known abbreviations, and an abbreviation to its known full names.

Usage:
    from citeresolve.utils.journal_abbreviations import get_abbreviations, get_full_names

    get_abbreviations("Phys. Rev. D")   # ['PRD']
    get_full_names("PRD")               # ['Physical Review D', 'Phys. Rev. D', ...]
"""

import re
from typing import Dict, List

JOURNAL_PUNCT_RE = re.compile(r"[.,;:!?'\"()\[\]{}]")
JOURNAL_SPACE_RE = re.compile(r"\s+")
ABBREVIATION_NORMALIZE_RE = re.compile(r"[.\s\-_/]+")

# (known names, known abbreviations)
JOURNAL_ENTRIES = [
    (["Physical Review Letters", "Phys. Rev. Lett.", "Phys Rev Lett"], ["PRL"]),
    (["Physical Review D", "Phys. Rev. D", "Phys Rev D", "Physical Review D Particles Fields"], ["PRD"]),
    (["Physical Review A", "Phys. Rev. A", "Phys Rev A"], ["PRA"]),
    (["Physical Review B", "Phys. Rev. B", "Phys Rev B"], ["PRB"]),
    (["Physical Review C", "Phys. Rev. C", "Phys Rev C"], ["PRC"]),
    (["Physical Review E", "Phys. Rev. E", "Phys Rev E"], ["PRE"]),
    (["Physical Review X", "Phys. Rev. X", "Phys Rev X"], ["PRX"]),
    (["Physical Review Applied", "Phys. Rev. Applied"], ["PRApplied"]),
    (["Physical Review Accelerators and Beams", "Phys. Rev. Accel. Beams"], ["PRAB"]),
    (["Physical Review Physics Education Research", "Phys. Rev. Phys. Educ. Res."], ["PRPER"]),
    (["Physical Review Research", "Phys. Rev. Res."], ["PRResearch", "PRR"]),
    (["Physical Review Materials", "Phys. Rev. Mater."], ["PRMaterials", "PRM"]),
    (["Physical Review Fluids", "Phys. Rev. Fluids"], ["PRFluids", "PRF"]),
    (["Nature"], ["Nature"]),
    (["Nature Physics", "Nat. Phys.", "Nat Phys"], ["NP", "NatPhys"]),
    (["Nature Communications", "Nat. Commun.", "Nat Commun."], ["NC", "NatComm"]),
    (["Nature Materials", "Nat. Mater.", "Nat Mater"], ["NatMat"]),
    (["Nature Nanotechnology", "Nat. Nanotechnol.", "Nat Nanotechnol."], ["NatNano"]),
    (["Nature Photonics", "Nat. Photon.", "Nat Photon"], ["NatPhoton"]),
    (["Nature Chemistry", "Nat. Chem.", "Nat Chem"], ["NatChem"]),
    (["Science"], ["Science"]),
    (["Science Advances", "Sci. Adv.", "Sci Adv"], ["SciAdv"]),
    (["Science Bulletin", "Sci. Bull.", "Sci Bull", "科学通报"], ["SciBull", "SB"]),
    (["Journal of High Energy Physics", "J. High Energy Phys.", "JHEP"], ["JHEP"]),
    (["Nuclear Physics B", "Nucl. Phys. B"], ["NPB"]),
    (["Nuclear Physics A", "Nucl. Phys. A"], ["NPA"]),
    (["Physics Letters B", "Phys. Lett. B"], ["PLB"]),
    (["Physics Letters A", "Phys. Lett. A"], ["PLA"]),
    (["European Physical Journal C", "Eur. Phys. J. C"], ["EPJC"]),
    (["European Physical Journal A", "Eur. Phys. J. A"], ["EPJA"]),
    (["European Physical Journal B", "Eur. Phys. J. B"], ["EPJB"]),
    (["Classical and Quantum Gravity", "Class. Quantum Grav."], ["CQG"]),
    (["Reviews of Modern Physics", "Rev. Mod. Phys."], ["RMP"]),
    (["Progress of Theoretical Physics", "Prog. Theor. Phys."], ["PTP"]),
    (["Physics Reports", "Phys. Rep."], ["PhysRep"]),
    (["International Journal of Modern Physics A", "Int. J. Mod. Phys. A"], ["IJMPA"]),
    (["International Journal of Modern Physics D", "Int. J. Mod. Phys. D"], ["IJMPD"]),
    (["International Journal of Modern Physics E", "Int. J. Mod. Phys. E"], ["IJMPE"]),
    (["Modern Physics Letters A", "Mod. Phys. Lett. A"], ["MPLA"]),
    (["Chinese Physics C", "Chin. Phys. C"], ["CPC"]),
    (["Chinese Physics Letters", "Chin. Phys. Lett."], ["CPL"]),
    (["Chinese Physics B", "Chin. Phys. B"], ["CPB"]),
    (["Chinese Physics A", "Chin. Phys. A"], ["CPA"]),
    (["Chinese Journal of Physics", "Chin. J. Phys."], ["CJP"]),
    (["Communications in Theoretical Physics", "Commun. Theor. Phys."], ["CTP"]),
    (["Acta Physica Sinica", "Acta Phys. Sin.", "物理学报"], ["APS"]),
    (["Chinese Journal of Chemical Physics", "Chin. J. Chem. Phys.", "化学物理学报"], ["CJCP"]),
    (["High Energy Physics and Nuclear Physics", "High Energy Phys. Nucl. Phys.", "高能物理与核物理"], ["HEPNP"]),
    (["Nuclear Science and Techniques", "Nucl. Sci. Tech.", "核技术"], ["NST"]),
    ([
        "Science China Physics Mechanics and Astronomy",
        "Sci. China Phys. Mech. Astron.",
        "中国科学物理学力学天文学",
        "中国科学 物理学 力学 天文学",
    ], ["SCPMA"]),
    (["Journal of Physics G", "J. Phys. G"], ["JPhysG", "JPG"]),
    (["New Journal of Physics", "New J. Phys."], ["NJP"]),
    (["Journal of Cosmology and Astroparticle Physics", "J. Cosmol. Astropart. Phys."], ["JCAP"]),
    ([
        "Annual Review of Nuclear and Particle Science",
        "Annu. Rev. Nucl. Part. Sci.",
        "Ann. Rev. Nucl. Part. Sci.",
    ], ["ARNPS"]),
    (["Annals of Physics", "Ann. Phys.", "Ann Phys"], ["AnnPhys"]),
    (["Reports on Progress in Physics", "Rep. Prog. Phys.", "Rept. Prog. Phys."], ["RPP"]),
    (["Fortschritte der Physik", "Fortsch. Phys.", "Fortschr. Phys."], ["FortschPhys"]),
    ([
        "Nuclear Instruments and Methods in Physics Research Section A",
        "Nucl. Instrum. Methods Phys. Res. A",
        "Nucl. Instrum. Meth. A",
        "NIM A",
    ], ["NIMA"]),
    ([
        "Nuclear Instruments and Methods in Physics Research Section B",
        "Nucl. Instrum. Methods Phys. Res. B",
        "Nucl. Instrum. Meth. B",
        "NIM B",
    ], ["NIMB"]),
    (["Physical Review", "Phys. Rev."], ["PR"]),
    (["Progress of Theoretical and Experimental Physics", "Prog. Theor. Exp. Phys.", "PTEP"], ["PTEP"]),
    (["Zeitschrift für Physik C", "Z. Phys. C", "Zeit. Phys. C"], ["ZPC"]),
    (["Zeitschrift für Physik A", "Z. Phys. A", "Zeit. Phys. A"], ["ZPA"]),
    (["Il Nuovo Cimento A", "Nuovo Cimento A", "Nuovo Cim. A"], ["NCA"]),
    (["Il Nuovo Cimento B", "Nuovo Cimento B", "Nuovo Cim. B"], ["NCB"]),
    (["Communications in Mathematical Physics", "Commun. Math. Phys."], ["CMP"]),
    (["Living Reviews in Relativity", "Living Rev. Relativ.", "Living Rev. Rel."], ["LRR"]),
    (["Astrophysical Journal", "Astrophys. J."], ["ApJ"]),
    (["Astrophysical Journal Letters", "Astrophys. J. Lett."], ["ApJL"]),
    (["Monthly Notices of the Royal Astronomical Society", "Mon. Not. Roy. Astron. Soc."], ["MNRAS"]),
    (["Astronomy and Astrophysics", "Astron. Astrophys."], ["AA"]),
    (["Computer Physics Communications", "Comput. Phys. Commun."], ["CPC_Comp"]),
    (["Few-Body Systems", "Few Body Syst."], ["FBS"]),
    (["Physics of the Dark Universe", "Phys. Dark Univ."], ["PDU"]),
]


def normalize_journal_name(name: str) -> str:
    """Lowercase a journal name and strip punctuation and extra whitespace"""
    if not name:
        return ""
    name = JOURNAL_PUNCT_RE.sub("", name.lower())
    return JOURNAL_SPACE_RE.sub(" ", name).strip()


def normalize_abbreviation(value: str) -> str:
    return ABBREVIATION_NORMALIZE_RE.sub("", value.lower()) if value else ""


def _build_maps():
    abbreviation_map: Dict[str, List[str]] = {}
    fullname_map: Dict[str, List[str]] = {}
    for names, abbreviations in JOURNAL_ENTRIES:
        unique_abbreviations = list(dict.fromkeys(a for a in abbreviations if a))
        for name in names:
            normalized_name = normalize_journal_name(name)
            if not normalized_name or not unique_abbreviations:
                continue
            abbreviation_map[normalized_name] = unique_abbreviations
            for abbr in unique_abbreviations:
                normalized_abbr = normalize_abbreviation(abbr)
                if not normalized_abbr:
                    continue
                full_names = fullname_map.setdefault(normalized_abbr, [])
                if name not in full_names:
                    full_names.append(name)
    return abbreviation_map, fullname_map


JOURNAL_ABBREVIATION_MAP, JOURNAL_FULLNAME_MAP = _build_maps()


def get_abbreviations(journal_name: str) -> List[str]:
    """Return known abbreviations for a journal name (empty list if unknown)"""
    normalized = normalize_journal_name(journal_name)
    return list(JOURNAL_ABBREVIATION_MAP.get(normalized, [])) if normalized else []


def get_full_names(abbreviation: str) -> List[str]:
    """Return known full names for an abbreviation (empty list if unknown)"""
    normalized = normalize_abbreviation(abbreviation)
    return list(JOURNAL_FULLNAME_MAP.get(normalized, [])) if normalized else []
