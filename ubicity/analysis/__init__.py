from .connections import InterdisciplinaryConnection, find_interdisciplinary_connections
from .locations import LocationAggregator, LocationSummary
from .network import DomainNetwork, DomainNode, DomainEdge, generate_domain_network, edge_key
from .journey import JourneyTracker, LearnerJourney, TimelineEntry, DomainEvolution
from .report import ReportAssembler, AnalysisReport, ReportSummary
