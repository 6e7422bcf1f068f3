# pipeline/ — entry scripts for the species distribution analysis.
#
#   run_analysis → synthesise data, plot, fit OLS + random forest, write summary
#
# The steps themselves live in species_distribution.pipeline.run_analysis.
